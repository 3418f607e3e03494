import logging

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from arena.data.rules import MAX_STAGE, MIN_STAGE
from arena.errors import UnknownRun
from arena.models.battle import Battle
from arena.models.run import Run, RunStatus
from arena.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


async def create_run(
    db: AsyncSession, player_id: str, stage: int = MIN_STAGE, wins: int = 0, losses: int = 0
) -> Run:
    if not player_id:
        raise ValueError("player_id is required")
    if stage < MIN_STAGE or stage > MAX_STAGE:
        raise ValueError(f"Stage must be between {MIN_STAGE} and {MAX_STAGE}")
    if wins < 0 or losses < 0:
        raise ValueError("Wins and losses cannot be negative")

    run = Run(player_id=player_id, stage=stage, wins=wins, losses=losses, status=RunStatus.active)
    db.add(run)
    await db.commit()
    await db.refresh(run)
    return run


async def get_run(db: AsyncSession, run_id: str) -> Run | None:
    result = await db.execute(select(Run).where(Run.id == run_id))
    return result.scalar_one_or_none()


async def get_run_or_raise(db: AsyncSession, run_id: str) -> Run:
    run = await get_run(db, run_id)
    if run is None:
        raise UnknownRun(run_id)
    return run


async def delete_run(db: AsyncSession, run_id: str) -> None:
    """Delete a run together with its battles and snapshots.

    Battles of *other* runs that fought one of this run's snapshots survive
    with enemy_snapshot_id cleared.
    """
    run = await get_run_or_raise(db, run_id)

    snapshot_ids = select(Snapshot.id).where(Snapshot.run_id == run.id)
    await db.execute(
        update(Battle)
        .where(Battle.enemy_snapshot_id.in_(snapshot_ids))
        .values(enemy_snapshot_id=None)
        .execution_options(synchronize_session="fetch")
    )
    battles_deleted = await db.execute(delete(Battle).where(Battle.run_id == run.id))
    snapshots_deleted = await db.execute(delete(Snapshot).where(Snapshot.run_id == run.id))

    await db.delete(run)
    await db.commit()

    logger.info(
        "Deleted run %s (battles=%s, snapshots=%s)",
        run_id,
        battles_deleted.rowcount,
        snapshots_deleted.rowcount,
    )
