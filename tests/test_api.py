"""HTTP surface tests: status codes and payload shapes for every router."""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from arena.models.bot_team import BotTeam
from arena.services.bot_team_service import seed_bot_teams


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def team_payload(*unit_ids: str, y: int = 0) -> dict:
    return {
        "units": [{"unitId": u, "tier": 1} for u in unit_ids],
        "positions": [{"x": i, "y": y} for i in range(len(unit_ids))],
    }


async def create_run(client: AsyncClient, player_id: str = "alice", **progress) -> dict:
    resp = await client.post("/runs", json={"player_id": player_id, **progress})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def add_bot(db: AsyncSession, stage: int = 1, difficulty: int = 1) -> BotTeam:
    bot = BotTeam(
        stage=stage,
        difficulty=difficulty,
        team={"units": [{"unitId": "rogue", "tier": 1, "position": {"x": 0, "y": 9}}]},
    )
    db.add(bot)
    await db.commit()
    return bot


async def start_battle(client: AsyncClient, run_id: str) -> dict:
    resp = await client.post(f"/runs/{run_id}/battles")
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Health & teams
# ---------------------------------------------------------------------------

class TestHealthAndValidation:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_validate_valid_team(self, client: AsyncClient):
        resp = await client.post(
            "/teams/validate", json=team_payload("knight", "knight", "knight", "archer", "rogue")
        )
        assert resp.status_code == 200
        assert resp.json() == {"valid": True, "total_cost": 23, "violations": []}

    async def test_validate_invalid_team(self, client: AsyncClient):
        resp = await client.post(
            "/teams/validate",
            json=team_payload("knight", "knight", "knight", "archer", "rogue", "knight", "knight"),
        )
        data = resp.json()
        assert data["valid"] is False
        assert data["total_cost"] == 33
        assert len(data["violations"]) == 1


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------

class TestRunsApi:
    async def test_create_and_get(self, db_client: AsyncClient):
        run = await create_run(db_client, stage=2, wins=1)
        resp = await db_client.get(f"/runs/{run['id']}")
        assert resp.status_code == 200
        assert resp.json()["stage"] == 2
        assert resp.json()["status"] == "active"

    async def test_create_rejects_bad_stage(self, db_client: AsyncClient):
        resp = await db_client.post("/runs", json={"player_id": "alice", "stage": 12})
        assert resp.status_code == 422

    async def test_get_missing(self, db_client: AsyncClient):
        resp = await db_client.get("/runs/missing")
        assert resp.status_code == 404

    async def test_delete(self, db_client: AsyncClient):
        run = await create_run(db_client)
        resp = await db_client.delete(f"/runs/{run['id']}")
        assert resp.status_code == 200
        assert (await db_client.get(f"/runs/{run['id']}")).status_code == 404
        assert (await db_client.delete(f"/runs/{run['id']}")).status_code == 404


# ---------------------------------------------------------------------------
# Battles
# ---------------------------------------------------------------------------

class TestBattlesApi:
    async def test_start_against_bot(self, db_client: AsyncClient, db_session: AsyncSession):
        bot = await add_bot(db_session)
        run = await create_run(db_client)
        data = await start_battle(db_client, run["id"])
        assert data["battle"]["result"] == "pending"
        assert data["battle"]["events"] is None
        assert data["battle"]["is_player_battle"] is False
        assert data["opponent"]["kind"] == "bot"
        assert data["opponent"]["bot_team_id"] == bot.id
        assert data["opponent"]["team"]["units"][0]["unitId"] == "rogue"

    async def test_start_against_snapshot(self, db_client: AsyncClient):
        bob = await create_run(db_client, "bob")
        resp = await db_client.post(
            "/snapshots", json={"run_id": bob["id"], "team": team_payload("knight", "mage")}
        )
        snapshot = resp.json()
        run = await create_run(db_client, "alice")
        data = await start_battle(db_client, run["id"])
        assert data["opponent"]["kind"] == "snapshot"
        assert data["opponent"]["snapshot_id"] == snapshot["id"]
        assert data["battle"]["enemy_snapshot_id"] == snapshot["id"]

    async def test_start_without_opponent(self, db_client: AsyncClient):
        run = await create_run(db_client)
        resp = await db_client.post(f"/runs/{run['id']}/battles")
        assert resp.status_code == 503

    async def test_start_twice(self, db_client: AsyncClient, db_session: AsyncSession):
        await add_bot(db_session)
        run = await create_run(db_client)
        await start_battle(db_client, run["id"])
        resp = await db_client.post(f"/runs/{run['id']}/battles")
        assert resp.status_code == 409

    async def test_start_unknown_run(self, db_client: AsyncClient):
        resp = await db_client.post("/runs/missing/battles")
        assert resp.status_code == 404

    async def test_resolve_and_verify(self, db_client: AsyncClient, db_session: AsyncSession):
        await add_bot(db_session)
        run = await create_run(db_client)
        battle_id = (await start_battle(db_client, run["id"]))["battle"]["id"]

        resp = await db_client.post(f"/battles/{battle_id}/resolve", json=team_payload("knight", "archer"))
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["result"] in ("win", "loss")
        assert data["event_count"] == len(data["events"]) > 0

        resp = await db_client.get(f"/battles/{battle_id}/verify")
        assert resp.status_code == 200
        assert resp.json() == {"battle_id": battle_id, "matches": True}

        again = await db_client.post(f"/battles/{battle_id}/resolve", json=team_payload("knight"))
        assert again.status_code == 409

        run_now = (await db_client.get(f"/runs/{run['id']}")).json()
        assert run_now["wins"] + run_now["losses"] == 1

    async def test_resolve_invalid_team(self, db_client: AsyncClient, db_session: AsyncSession):
        await add_bot(db_session)
        run = await create_run(db_client)
        battle_id = (await start_battle(db_client, run["id"]))["battle"]["id"]
        resp = await db_client.post(f"/battles/{battle_id}/resolve", json=team_payload(*["warlock"] * 5))
        assert resp.status_code == 422
        assert resp.json()["detail"]["violations"]
        battle = (await db_client.get(f"/battles/{battle_id}")).json()
        assert battle["result"] == "pending"

    async def test_verify_pending(self, db_client: AsyncClient, db_session: AsyncSession):
        await add_bot(db_session)
        run = await create_run(db_client)
        battle_id = (await start_battle(db_client, run["id"]))["battle"]["id"]
        resp = await db_client.get(f"/battles/{battle_id}/verify")
        assert resp.status_code == 409

    async def test_missing_battle(self, db_client: AsyncClient):
        assert (await db_client.get("/battles/missing")).status_code == 404
        resp = await db_client.post("/battles/missing/resolve", json=team_payload("knight"))
        assert resp.status_code == 404

    async def test_missing_battle_checked_before_roster(self, db_client: AsyncClient):
        resp = await db_client.post("/battles/missing/resolve", json=team_payload(*["warlock"] * 5))
        assert resp.status_code == 404

    async def test_list_and_stats(self, db_client: AsyncClient, db_session: AsyncSession):
        await add_bot(db_session)
        run = await create_run(db_client)
        battle_id = (await start_battle(db_client, run["id"]))["battle"]["id"]
        await db_client.post(f"/battles/{battle_id}/resolve", json=team_payload("knight"))
        await start_battle(db_client, run["id"])

        resp = await db_client.get(f"/runs/{run['id']}/battles")
        assert resp.status_code == 200
        assert len(resp.json()) == 2

        stats = (await db_client.get(f"/runs/{run['id']}/battles/stats")).json()
        assert stats["total_battles"] == 2
        assert stats["pending"] == 1
        assert stats["wins"] + stats["losses"] == 1


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

class TestSnapshotsApi:
    async def test_create_and_get(self, db_client: AsyncClient):
        run = await create_run(db_client, "bob", stage=3, wins=2)
        resp = await db_client.post(
            "/snapshots", json={"run_id": run["id"], "team": team_payload("knight", "priest")}
        )
        assert resp.status_code == 201, resp.text
        snapshot = resp.json()
        assert snapshot["player_id"] == "bob"
        assert (snapshot["stage"], snapshot["wins"]) == (3, 2)
        assert snapshot["team"]["units"][1]["position"] == {"x": 1, "y": 0}

        resp = await db_client.get(f"/snapshots/{snapshot['id']}")
        assert resp.status_code == 200

    async def test_create_invalid_team(self, db_client: AsyncClient):
        run = await create_run(db_client)
        resp = await db_client.post(
            "/snapshots", json={"run_id": run["id"], "team": team_payload(*["knight"] * 7)}
        )
        assert resp.status_code == 422

    async def test_create_unknown_run(self, db_client: AsyncClient):
        resp = await db_client.post("/snapshots", json={"run_id": "missing", "team": team_payload("knight")})
        assert resp.status_code == 404

    async def test_list_excludes_player(self, db_client: AsyncClient):
        for player in ("alice", "bob"):
            run = await create_run(db_client, player)
            await db_client.post("/snapshots", json={"run_id": run["id"], "team": team_payload("knight")})

        everyone = (await db_client.get("/snapshots", params={"stage": 1})).json()
        assert {s["player_id"] for s in everyone} == {"alice", "bob"}
        others = (await db_client.get("/snapshots", params={"stage": 1, "exclude_player_id": "alice"})).json()
        assert [s["player_id"] for s in others] == ["bob"]

    async def test_stage_stats(self, db_client: AsyncClient):
        run = await create_run(db_client, "bob", stage=4, wins=3)
        await db_client.post("/snapshots", json={"run_id": run["id"], "team": team_payload("knight")})
        stats = (await db_client.get("/snapshots/stats/4")).json()
        assert stats["total_snapshots"] == 1
        assert stats["avg_wins"] == 3.0
        assert (await db_client.get("/snapshots/stats/11")).status_code == 400

    async def test_delete(self, db_client: AsyncClient):
        run = await create_run(db_client, "bob")
        snapshot = (await db_client.post(
            "/snapshots", json={"run_id": run["id"], "team": team_payload("knight")}
        )).json()
        assert (await db_client.delete(f"/snapshots/{snapshot['id']}")).status_code == 200
        assert (await db_client.get(f"/snapshots/{snapshot['id']}")).status_code == 404
        assert (await db_client.delete(f"/snapshots/{snapshot['id']}")).status_code == 404

    async def test_delete_keeps_battle(self, db_client: AsyncClient):
        bob = await create_run(db_client, "bob")
        snapshot = (await db_client.post(
            "/snapshots", json={"run_id": bob["id"], "team": team_payload("knight")}
        )).json()
        alice = await create_run(db_client, "alice")
        battle_id = (await start_battle(db_client, alice["id"]))["battle"]["id"]

        await db_client.delete(f"/snapshots/{snapshot['id']}")

        battle = (await db_client.get(f"/battles/{battle_id}")).json()
        assert battle["enemy_snapshot_id"] is None
        assert battle["result"] == "pending"


# ---------------------------------------------------------------------------
# Bot teams
# ---------------------------------------------------------------------------

class TestBotTeamsApi:
    async def test_list_and_coverage(self, db_client: AsyncClient, db_session: AsyncSession):
        await seed_bot_teams(db_session, stages=range(2, 3), compositions=2)

        bots = (await db_client.get("/bot-teams", params={"stage": 2})).json()
        assert len(bots) == 20
        assert bots[0]["difficulty"] == 1
        assert bots[0]["difficulty_label"] == "Easy"
        assert bots[0]["unit_count"] == len(bots[0]["team"]["units"])

        coverage = (await db_client.get("/bot-teams/coverage/2")).json()
        assert coverage["total_teams"] == 20
        assert coverage["difficulties"]["10"] == 2

    async def test_coverage_invalid_stage(self, db_client: AsyncClient):
        assert (await db_client.get("/bot-teams/coverage/0")).status_code == 400
