"""Battle service: the pending -> win/loss lifecycle of a run's battles.

A battle is created pending with its seed and frozen enemy roster, then
finalized exactly once when the simulator returns a verdict.  Within this
process a per-run asyncio.Lock serializes creation and finalization; across
processes the partial unique index on (run_id WHERE result = 'pending') and the
conditional finalizing UPDATE give the same guarantees.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import math
import secrets
import weakref
from typing import Any, Awaitable, Callable, Union

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from arena.config import settings
from arena.data.units import unit_cost
from arena.errors import (
    BattleAlreadyResolved,
    BattleInProgress,
    BattleNotResolved,
    IneligibleOpponent,
    InvalidTeamComposition,
    SimulatorFailure,
    UnknownBattle,
    UnknownRun,
    UnknownSnapshot,
)
from arena.models.battle import Battle, BattleResult
from arena.models.run import Run
from arena.schemas.team import TeamSnapshot
from arena.services.opponent_resolver import OpponentRef, SnapshotOpponent, resolve_opponent
from arena.services.run_service import get_run, get_run_or_raise
from arena.services.simulator import SimulationOutcome, simulate_battle
from arena.services.snapshot_service import get_snapshot
from arena.services.team_validator import CostProvider, validate_team_snapshot

logger = logging.getLogger(__name__)

MAX_SEED = 2**31 - 1

Simulator = Callable[
    [TeamSnapshot, TeamSnapshot, int],
    Union[SimulationOutcome, Awaitable[SimulationOutcome]],
]


# ---------------------------------------------------------------------------
# Per-run locks
# ---------------------------------------------------------------------------

# Entries disappear once no coroutine holds or waits on the lock
_run_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def run_lock(run_id: str) -> asyncio.Lock:
    lock = _run_locks.get(run_id)
    if lock is None:
        lock = asyncio.Lock()
        _run_locks[run_id] = lock
    return lock


def new_seed() -> int:
    return secrets.randbelow(MAX_SEED)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

async def get_battle(db: AsyncSession, battle_id: str) -> Battle | None:
    result = await db.execute(select(Battle).where(Battle.id == battle_id))
    return result.scalar_one_or_none()


async def get_battle_or_raise(db: AsyncSession, battle_id: str) -> Battle:
    battle = await get_battle(db, battle_id)
    if battle is None:
        raise UnknownBattle(battle_id)
    return battle


async def get_pending_battle(db: AsyncSession, run_id: str) -> Battle | None:
    result = await db.execute(
        select(Battle).where(Battle.run_id == run_id, Battle.result == BattleResult.pending)
    )
    return result.scalar_one_or_none()


async def list_battles_for_run(db: AsyncSession, run_id: str) -> list[Battle]:
    await get_run_or_raise(db, run_id)
    result = await db.execute(
        select(Battle).where(Battle.run_id == run_id).order_by(Battle.created_at, Battle.id)
    )
    return list(result.scalars().all())


def is_player_battle(battle: Battle) -> bool:
    """True when the battle was fought against a (still existing) player snapshot."""
    return battle.enemy_snapshot_id is not None


def event_count(battle: Battle) -> int:
    return len(battle.events or [])


def battle_summary(battle: Battle) -> dict[str, Any]:
    return {
        "id": battle.id,
        "run_id": battle.run_id,
        "enemy_snapshot_id": battle.enemy_snapshot_id,
        "seed": battle.seed,
        "result": battle.result,
        "events": battle.events,
        "is_player_battle": is_player_battle(battle),
        "event_count": event_count(battle),
        "created_at": battle.created_at,
    }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


async def get_battle_stats(db: AsyncSession, run_id: str) -> dict[str, int]:
    """Totals per result, win rate (percent of all battles) and mean event count."""
    battles = await list_battles_for_run(db, run_id)
    total = len(battles)
    wins = sum(1 for b in battles if b.result == BattleResult.win)
    losses = sum(1 for b in battles if b.result == BattleResult.loss)
    pending = sum(1 for b in battles if b.result == BattleResult.pending)
    return {
        "total_battles": total,
        "wins": wins,
        "losses": losses,
        "pending": pending,
        "win_rate": _round_half_up(wins / total * 100) if total else 0,
        "avg_event_count": _round_half_up(sum(event_count(b) for b in battles) / total) if total else 0,
    }


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

async def _create_battle_locked(
    db: AsyncSession, run: Run, opponent: OpponentRef, seed: int | None
) -> Battle:
    run_id = run.id
    enemy_snapshot_id = None
    enemy_team = opponent.team.to_json()
    if isinstance(opponent, SnapshotOpponent):
        snapshot = await get_snapshot(db, opponent.snapshot_id)
        if snapshot is None:
            raise UnknownSnapshot(opponent.snapshot_id)
        if snapshot.player_id == run.player_id:
            raise IneligibleOpponent(snapshot.id, "snapshot belongs to the run's own player")
        if snapshot.stage != run.stage:
            raise IneligibleOpponent(
                snapshot.id, f"snapshot is at stage {snapshot.stage}, run is at stage {run.stage}"
            )
        enemy_snapshot_id = snapshot.id
        # The stored roster is what gets fought, whatever the caller passed along
        enemy_team = snapshot.team

    if await get_pending_battle(db, run_id) is not None:
        raise BattleInProgress(run_id)

    battle = Battle(
        run_id=run_id,
        enemy_snapshot_id=enemy_snapshot_id,
        seed=new_seed() if seed is None else seed,
        result=BattleResult.pending,
        events=None,
        enemy_team=enemy_team,
    )
    db.add(battle)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        # A concurrent delete of the run or snapshot trips a foreign key;
        # anything else is another process creating a pending battle first
        if await get_run(db, run_id) is None:
            raise UnknownRun(run_id) from exc
        if enemy_snapshot_id is not None and await get_snapshot(db, enemy_snapshot_id) is None:
            raise UnknownSnapshot(enemy_snapshot_id) from exc
        raise BattleInProgress(run_id) from exc
    await db.refresh(battle)

    logger.info(
        "Created battle %s for run %s (opponent=%s, seed=%s)",
        battle.id,
        run_id,
        opponent.kind,
        battle.seed,
    )
    return battle


async def create_battle(
    db: AsyncSession, run_id: str, opponent: OpponentRef, seed: int | None = None
) -> Battle:
    """Persist a pending battle against an already chosen opponent."""
    async with run_lock(run_id):
        run = await get_run_or_raise(db, run_id)
        return await _create_battle_locked(db, run, opponent, seed)


async def start_battle(
    db: AsyncSession, run_id: str, seed: int | None = None
) -> tuple[Battle, OpponentRef]:
    """Resolve the run's opponent and create the pending battle as one step."""
    async with run_lock(run_id):
        run = await get_run_or_raise(db, run_id)
        if await get_pending_battle(db, run.id) is not None:
            raise BattleInProgress(run.id)
        opponent = await resolve_opponent(db, run)
        battle = await _create_battle_locked(db, run, opponent, seed)
        return battle, opponent


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

async def _call_simulator(
    simulator: Simulator, player: TeamSnapshot, enemy: TeamSnapshot, seed: int
) -> Any:
    if inspect.iscoroutinefunction(simulator):
        outcome = await simulator(player, enemy, seed)
    else:
        outcome = await asyncio.to_thread(simulator, player, enemy, seed)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome


async def run_simulator(
    battle_id: str,
    simulator: Simulator,
    player: TeamSnapshot,
    enemy: TeamSnapshot,
    seed: int,
    timeout: float,
) -> tuple[BattleResult, list[dict[str, Any]]]:
    """Await the simulator and check its outcome.

    Every failure mode surfaces as SimulatorFailure.
    """
    try:
        outcome = await asyncio.wait_for(_call_simulator(simulator, player, enemy, seed), timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("Simulator timed out for battle %s after %ss", battle_id, timeout)
        raise SimulatorFailure(battle_id, f"timed out after {timeout}s") from exc
    except Exception as exc:
        logger.warning("Simulator raised for battle %s: %r", battle_id, exc)
        raise SimulatorFailure(battle_id, repr(exc)) from exc

    try:
        verdict = BattleResult(getattr(outcome, "verdict", None))
    except ValueError as exc:
        logger.warning("Simulator returned an unknown verdict for battle %s", battle_id)
        raise SimulatorFailure(battle_id, "unknown verdict") from exc
    if verdict == BattleResult.pending:
        logger.warning("Simulator returned a pending verdict for battle %s", battle_id)
        raise SimulatorFailure(battle_id, "verdict must be win or loss")

    events = getattr(outcome, "events", None)
    if not isinstance(events, list):
        logger.warning("Simulator returned no event list for battle %s", battle_id)
        raise SimulatorFailure(battle_id, "events must be a list")

    # Events are stored as JSON; normalize now so replays compare like with like
    try:
        events = json.loads(json.dumps(events, allow_nan=False))
    except (TypeError, ValueError) as exc:
        logger.warning("Simulator returned events that are not JSON for battle %s: %r", battle_id, exc)
        raise SimulatorFailure(battle_id, f"events are not JSON serializable: {exc}") from exc

    return verdict, events


async def resolve_battle_outcome(
    db: AsyncSession,
    battle_id: str,
    player_team: TeamSnapshot,
    simulator: Simulator = simulate_battle,
    timeout: float | None = None,
    cost_of: CostProvider = unit_cost,
) -> Battle:
    """Simulate a pending battle and record its verdict.

    The battle stays pending if validation or the simulator fails.  On success
    result, events and player_team are written in one conditional UPDATE and
    the run's win or loss tally goes up in the same commit.
    """
    battle = await get_battle_or_raise(db, battle_id)

    async with run_lock(battle.run_id):
        await db.refresh(battle)
        if battle.result != BattleResult.pending:
            raise BattleAlreadyResolved(battle.id, battle.result.value)

        violations = validate_team_snapshot(player_team, cost_of)
        if violations:
            raise InvalidTeamComposition(violations)

        enemy_team = TeamSnapshot.model_validate(battle.enemy_team or {"units": []})
        verdict, events = await run_simulator(
            battle.id,
            simulator,
            player_team,
            enemy_team,
            battle.seed,
            settings.simulator_timeout_seconds if timeout is None else timeout,
        )

        finalized = await db.execute(
            update(Battle)
            .where(Battle.id == battle.id, Battle.result == BattleResult.pending)
            .values(result=verdict, events=events, player_team=player_team.to_json())
            .execution_options(synchronize_session="fetch")
        )
        if finalized.rowcount == 0:
            await db.rollback()
            await db.refresh(battle)
            raise BattleAlreadyResolved(battle.id, battle.result.value)

        tally = Run.wins if verdict == BattleResult.win else Run.losses
        await db.execute(
            update(Run)
            .where(Run.id == battle.run_id)
            .values({tally: tally + 1})
            .execution_options(synchronize_session="fetch")
        )
        await db.commit()
        await db.refresh(battle)

    logger.info(
        "Finalized battle %s for run %s: %s (%s events)",
        battle.id,
        battle.run_id,
        verdict.value,
        len(events),
    )
    return battle


async def verify_battle_replay(
    db: AsyncSession, battle_id: str, simulator: Simulator = simulate_battle, timeout: float | None = None
) -> bool:
    """Re-run the simulator on the stored rosters and seed; True if it reproduces the record."""
    battle = await get_battle_or_raise(db, battle_id)
    if battle.result == BattleResult.pending:
        raise BattleNotResolved(battle.id)

    player_team = TeamSnapshot.model_validate(battle.player_team or {"units": []})
    enemy_team = TeamSnapshot.model_validate(battle.enemy_team or {"units": []})
    verdict, events = await run_simulator(
        battle.id,
        simulator,
        player_team,
        enemy_team,
        battle.seed,
        settings.simulator_timeout_seconds if timeout is None else timeout,
    )
    matches = verdict == battle.result and events == (battle.events or [])
    if not matches:
        logger.warning("Replay of battle %s does not match the stored record", battle.id)
    return matches
