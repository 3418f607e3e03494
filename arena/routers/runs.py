from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database import get_db
from arena.errors import BattleInProgress, NoEligibleOpponent, UnknownRun
from arena.routers.errors import conflict, not_found
from arena.schemas.battle import BattleResponse, BattleStatsResponse, StartBattleResponse
from arena.schemas.run import RunCreate, RunResponse
from arena.services.battle_service import (
    battle_summary,
    get_battle_stats,
    list_battles_for_run,
    start_battle,
)
from arena.services.opponent_resolver import opponent_payload
from arena.services.run_service import create_run, delete_run, get_run

router = APIRouter(prefix="/runs", tags=["runs"])


@router.post("", response_model=RunResponse, status_code=status.HTTP_201_CREATED)
async def create_run_endpoint(body: RunCreate, db: AsyncSession = Depends(get_db)):
    try:
        run = await create_run(
            db, player_id=body.player_id, stage=body.stage, wins=body.wins, losses=body.losses
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return run


@router.get("/{run_id}", response_model=RunResponse)
async def get_run_endpoint(run_id: str, db: AsyncSession = Depends(get_db)):
    run = await get_run(db, run_id)
    if run is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Run not found")
    return run


@router.delete("/{run_id}")
async def delete_run_endpoint(run_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a run with its battles and snapshots."""
    try:
        await delete_run(db, run_id)
    except UnknownRun as e:
        raise not_found(e)
    return {"detail": "Run deleted"}


@router.post("/{run_id}/battles", response_model=StartBattleResponse, status_code=status.HTTP_201_CREATED)
async def start_battle_endpoint(run_id: str, db: AsyncSession = Depends(get_db)):
    """Pick the run's next opponent and open a pending battle against it."""
    try:
        battle, opponent = await start_battle(db, run_id)
    except UnknownRun as e:
        raise not_found(e)
    except BattleInProgress as e:
        raise conflict(e)
    except NoEligibleOpponent as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return StartBattleResponse(battle=battle_summary(battle), opponent=opponent_payload(opponent))


@router.get("/{run_id}/battles", response_model=list[BattleResponse])
async def list_run_battles(run_id: str, db: AsyncSession = Depends(get_db)):
    try:
        battles = await list_battles_for_run(db, run_id)
    except UnknownRun as e:
        raise not_found(e)
    return [battle_summary(b) for b in battles]


@router.get("/{run_id}/battles/stats", response_model=BattleStatsResponse)
async def run_battle_stats(run_id: str, db: AsyncSession = Depends(get_db)):
    try:
        return await get_battle_stats(db, run_id)
    except UnknownRun as e:
        raise not_found(e)
