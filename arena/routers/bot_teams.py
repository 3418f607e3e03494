from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from arena.data.rules import MAX_STAGE, MIN_STAGE
from arena.database import get_db
from arena.schemas.bot_team import BotTeamResponse, StageCoverageResponse
from arena.services.bot_difficulty import bot_team_summary
from arena.services.bot_team_service import get_stage_coverage, list_bot_teams_for_stage

router = APIRouter(prefix="/bot-teams", tags=["bot-teams"])


@router.get("", response_model=list[BotTeamResponse])
async def list_bot_teams_endpoint(
    stage: int = Query(..., ge=MIN_STAGE, le=MAX_STAGE),
    db: AsyncSession = Depends(get_db),
):
    bots = await list_bot_teams_for_stage(db, stage)
    return [{**bot_team_summary(bot), "team": bot.team} for bot in bots]


@router.get("/coverage/{stage}", response_model=StageCoverageResponse)
async def stage_coverage_endpoint(stage: int, db: AsyncSession = Depends(get_db)):
    """Bot team count per difficulty; a zero marks a gap that can end in 503s."""
    if stage < MIN_STAGE or stage > MAX_STAGE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Stage must be between {MIN_STAGE} and {MAX_STAGE}",
        )
    return await get_stage_coverage(db, stage)
