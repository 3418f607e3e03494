from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from arena.data.rules import MAX_STAGE, MIN_STAGE
from arena.database import get_db
from arena.errors import InvalidTeamComposition, UnknownRun, UnknownSnapshot
from arena.routers.errors import invalid_team, not_found
from arena.schemas.snapshot import SnapshotCreate, SnapshotResponse, SnapshotStageStats
from arena.services.snapshot_service import (
    create_snapshot,
    delete_snapshot,
    find_candidates,
    get_snapshot,
    get_stage_stats,
)

router = APIRouter(prefix="/snapshots", tags=["snapshots"])


@router.post("", response_model=SnapshotResponse, status_code=status.HTTP_201_CREATED)
async def create_snapshot_endpoint(body: SnapshotCreate, db: AsyncSession = Depends(get_db)):
    """Save the run's current team so other players can fight it."""
    try:
        snapshot = await create_snapshot(
            db, run_id=body.run_id, team=body.team, stage=body.stage, wins=body.wins
        )
    except UnknownRun as e:
        raise not_found(e)
    except InvalidTeamComposition as e:
        raise invalid_team(e)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return snapshot


@router.get("", response_model=list[SnapshotResponse])
async def list_snapshots_endpoint(
    stage: int = Query(..., ge=MIN_STAGE, le=MAX_STAGE),
    exclude_player_id: str | None = Query(default=None, description="Leave out this player's snapshots"),
    db: AsyncSession = Depends(get_db),
):
    # Player ids are never empty, so "" excludes nobody
    return await find_candidates(db, stage, exclude_player_id or "")


@router.get("/stats/{stage}", response_model=SnapshotStageStats)
async def snapshot_stage_stats(stage: int, db: AsyncSession = Depends(get_db)):
    try:
        return await get_stage_stats(db, stage)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{snapshot_id}", response_model=SnapshotResponse)
async def get_snapshot_endpoint(snapshot_id: str, db: AsyncSession = Depends(get_db)):
    snapshot = await get_snapshot(db, snapshot_id)
    if snapshot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Snapshot not found")
    return snapshot


@router.delete("/{snapshot_id}")
async def delete_snapshot_endpoint(snapshot_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a snapshot.  Battles fought against it are kept."""
    try:
        await delete_snapshot(db, snapshot_id)
    except UnknownSnapshot as e:
        raise not_found(e)
    return {"detail": "Snapshot deleted"}
