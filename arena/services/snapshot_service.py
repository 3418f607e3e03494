"""Snapshot service: recording player teams and finding them again as opponents.

find_candidates() is the matcher half of opponent resolution.  It is a plain
stage query that excludes the requesting player's own snapshots, newest
first.  Scoring candidates by win distance is left to the opponent resolver.
"""

import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from arena.data.rules import MAX_STAGE, MIN_STAGE
from arena.data.units import unit_cost
from arena.errors import UnknownSnapshot
from arena.models.battle import Battle
from arena.models.snapshot import Snapshot
from arena.schemas.team import TeamSetup
from arena.services.run_service import get_run_or_raise
from arena.services.team_validator import CostProvider, ensure_valid_team, team_setup_to_snapshot

logger = logging.getLogger(__name__)


def _check_stage(stage: int) -> None:
    if stage < MIN_STAGE or stage > MAX_STAGE:
        raise ValueError(f"Stage must be between {MIN_STAGE} and {MAX_STAGE}")


async def create_snapshot(
    db: AsyncSession,
    run_id: str,
    team: TeamSetup,
    stage: int | None = None,
    wins: int | None = None,
    cost_of: CostProvider = unit_cost,
) -> Snapshot:
    """Record the run's team as a future opponent.

    stage and wins default to the run's current values; the author is always
    the run's player.
    """
    run = await get_run_or_raise(db, run_id)

    stage = run.stage if stage is None else stage
    wins = run.wins if wins is None else wins
    _check_stage(stage)
    if wins < 0:
        raise ValueError("Wins cannot be negative")

    ensure_valid_team(team, cost_of)

    snapshot = Snapshot(
        player_id=run.player_id,
        run_id=run.id,
        stage=stage,
        wins=wins,
        team=team_setup_to_snapshot(team).to_json(),
    )
    db.add(snapshot)
    await db.commit()
    await db.refresh(snapshot)

    logger.info(
        "Created snapshot %s for player %s (run=%s, stage=%s, wins=%s, units=%s)",
        snapshot.id,
        run.player_id,
        run.id,
        stage,
        wins,
        len(team.units),
    )
    return snapshot


async def get_snapshot(db: AsyncSession, snapshot_id: str) -> Snapshot | None:
    result = await db.execute(select(Snapshot).where(Snapshot.id == snapshot_id))
    return result.scalar_one_or_none()


async def find_candidates(db: AsyncSession, stage: int, exclude_player_id: str) -> list[Snapshot]:
    """All snapshots at stage not authored by exclude_player_id, most recent first."""
    result = await db.execute(
        select(Snapshot)
        .where(Snapshot.stage == stage, Snapshot.player_id != exclude_player_id)
        .order_by(Snapshot.created_at.desc(), Snapshot.id)
    )
    candidates = list(result.scalars().all())
    logger.debug(
        "Found %s snapshot candidates at stage %s (excluding player %s)",
        len(candidates),
        stage,
        exclude_player_id,
    )
    return candidates


async def list_snapshots_for_player(db: AsyncSession, player_id: str) -> list[Snapshot]:
    result = await db.execute(
        select(Snapshot).where(Snapshot.player_id == player_id).order_by(Snapshot.created_at.desc())
    )
    return list(result.scalars().all())


async def get_stage_stats(db: AsyncSession, stage: int) -> dict:
    """Snapshot count and win spread at a stage (avg rounded to one decimal)."""
    _check_stage(stage)
    result = await db.execute(
        select(
            func.count(Snapshot.id),
            func.avg(Snapshot.wins),
            func.max(Snapshot.wins),
            func.min(Snapshot.wins),
        ).where(Snapshot.stage == stage)
    )
    total, avg_wins, max_wins, min_wins = result.one()
    return {
        "stage": stage,
        "total_snapshots": total,
        "avg_wins": round(float(avg_wins), 1) if total else 0.0,
        "max_wins": max_wins if total else 0,
        "min_wins": min_wins if total else 0,
    }


async def delete_snapshot(db: AsyncSession, snapshot_id: str) -> None:
    """Delete a snapshot; battles that fought it keep their row with the reference cleared."""
    snapshot = await get_snapshot(db, snapshot_id)
    if snapshot is None:
        raise UnknownSnapshot(snapshot_id)

    cleared = await db.execute(
        update(Battle)
        .where(Battle.enemy_snapshot_id == snapshot.id)
        .values(enemy_snapshot_id=None)
        .execution_options(synchronize_session="fetch")
    )
    await db.execute(delete(Snapshot).where(Snapshot.id == snapshot.id))
    await db.commit()

    logger.info("Deleted snapshot %s (battles detached=%s)", snapshot_id, cleared.rowcount)
