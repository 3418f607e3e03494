"""Tests for run creation and run deletion cleanup."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from arena.errors import UnknownRun
from arena.models.battle import Battle, BattleResult
from arena.models.run import RunStatus
from arena.models.snapshot import Snapshot
from arena.services.run_service import create_run, delete_run, get_run, get_run_or_raise

TEAM = {"units": [{"unitId": "knight", "tier": 1, "position": {"x": 0, "y": 0}}]}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _count(db: AsyncSession, model, *criteria) -> int:
    return await db.scalar(select(func.count()).select_from(model).where(*criteria))


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

class TestCreateRun:
    async def test_defaults(self, db_session: AsyncSession):
        run = await create_run(db_session, "alice")
        assert run.id
        assert (run.stage, run.wins, run.losses) == (1, 0, 0)
        assert run.status == RunStatus.active

    async def test_explicit_progress(self, db_session: AsyncSession):
        run = await create_run(db_session, "alice", stage=5, wins=4, losses=2)
        fetched = await get_run(db_session, run.id)
        assert (fetched.stage, fetched.wins, fetched.losses) == (5, 4, 2)

    @pytest.mark.parametrize("kwargs", [
        {"player_id": ""},
        {"player_id": "alice", "stage": 0},
        {"player_id": "alice", "stage": 10},
        {"player_id": "alice", "wins": -1},
        {"player_id": "alice", "losses": -1},
    ])
    async def test_rejects_bad_input(self, db_session: AsyncSession, kwargs):
        with pytest.raises(ValueError):
            await create_run(db_session, **kwargs)

    async def test_get_run_or_raise(self, db_session: AsyncSession):
        with pytest.raises(UnknownRun):
            await get_run_or_raise(db_session, "missing")


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

class TestDeleteRun:
    async def test_removes_battles_and_snapshots(self, db_session: AsyncSession):
        run = await create_run(db_session, "alice")
        run_id = run.id
        db_session.add(Snapshot(player_id="alice", run_id=run_id, stage=1, wins=0, team=TEAM))
        db_session.add(Battle(run_id=run_id, seed=1, result=BattleResult.loss, events=[]))
        await db_session.commit()

        await delete_run(db_session, run_id)

        assert await get_run(db_session, run_id) is None
        assert await _count(db_session, Snapshot, Snapshot.run_id == run_id) == 0
        assert await _count(db_session, Battle, Battle.run_id == run_id) == 0

    async def test_other_runs_battles_lose_reference_only(self, db_session: AsyncSession):
        alice = await create_run(db_session, "alice")
        bob = await create_run(db_session, "bob")
        bob_snapshot = Snapshot(player_id="bob", run_id=bob.id, stage=1, wins=0, team=TEAM)
        db_session.add(bob_snapshot)
        await db_session.commit()
        battle = Battle(
            run_id=alice.id,
            enemy_snapshot_id=bob_snapshot.id,
            seed=3,
            result=BattleResult.win,
            events=[{"type": "battle_end"}],
        )
        db_session.add(battle)
        await db_session.commit()

        await delete_run(db_session, bob.id)

        await db_session.refresh(battle)
        assert battle.enemy_snapshot_id is None
        assert battle.result == BattleResult.win
        assert battle.events == [{"type": "battle_end"}]
        assert await get_run(db_session, alice.id) is not None

    async def test_unknown_run(self, db_session: AsyncSession):
        with pytest.raises(UnknownRun):
            await delete_run(db_session, "missing")
