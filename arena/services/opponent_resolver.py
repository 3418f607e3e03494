"""Opponent resolution for a run's next battle.

Player snapshots at the run's stage are preferred; the one whose wins are
closest to the run's wins is chosen.  Only when no other player has a snapshot
at that stage does resolution fall back to a bot team in the run's win band,
preferring the difficulty closest to target_difficulty(wins).

Both choices break ties by newest created_at, then smallest id, so the same
database state always resolves to the same opponent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Union

from sqlalchemy.ext.asyncio import AsyncSession

from arena.errors import NoEligibleOpponent
from arena.models.bot_team import BotTeam
from arena.models.run import Run
from arena.models.snapshot import Snapshot
from arena.schemas.team import TeamSnapshot
from arena.services.bot_difficulty import is_appropriate, target_difficulty
from arena.services.bot_team_service import list_bot_teams_for_stage
from arena.services.snapshot_service import find_candidates

logger = logging.getLogger(__name__)


@dataclass
class SnapshotOpponent:
    snapshot_id: str
    team: TeamSnapshot
    wins: int

    kind = "snapshot"


@dataclass
class BotOpponent:
    bot_team_id: str
    team: TeamSnapshot
    difficulty: int

    kind = "bot"


OpponentRef = Union[SnapshotOpponent, BotOpponent]


def _newest_first(created_at: datetime) -> float:
    # SQLite hands back naive datetimes; they are stored as UTC
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return -created_at.timestamp()


def pick_snapshot(candidates: list[Snapshot], wins: int) -> Snapshot | None:
    if not candidates:
        return None
    return min(
        candidates,
        key=lambda s: (abs(s.wins - wins), _newest_first(s.created_at), s.id),
    )


def pick_bot_team(bots: list[BotTeam], stage: int, wins: int) -> BotTeam | None:
    eligible = [b for b in bots if is_appropriate(b, stage, wins)]
    if not eligible:
        return None
    target = target_difficulty(wins)
    return min(
        eligible,
        key=lambda b: (abs(b.difficulty - target), _newest_first(b.created_at), b.id),
    )


async def resolve_opponent(db: AsyncSession, run: Run) -> OpponentRef:
    """Choose the opponent for run's next battle.  Read-only."""
    candidates = await find_candidates(db, run.stage, run.player_id)
    snapshot = pick_snapshot(candidates, run.wins)
    if snapshot is not None:
        return SnapshotOpponent(
            snapshot_id=snapshot.id,
            team=TeamSnapshot.model_validate(snapshot.team),
            wins=snapshot.wins,
        )

    bots = await list_bot_teams_for_stage(db, run.stage)
    bot = pick_bot_team(bots, run.stage, run.wins)
    if bot is not None:
        return BotOpponent(
            bot_team_id=bot.id,
            team=TeamSnapshot.model_validate(bot.team),
            difficulty=bot.difficulty,
        )

    logger.warning(
        "No eligible opponent for run %s (stage=%s, wins=%s, bot teams at stage=%s)",
        run.id,
        run.stage,
        run.wins,
        len(bots),
    )
    raise NoEligibleOpponent(run.stage, run.wins)


def opponent_payload(opponent: OpponentRef) -> dict:
    """Plain dict form used by the HTTP layer."""
    if isinstance(opponent, SnapshotOpponent):
        return {
            "kind": "snapshot",
            "snapshot_id": opponent.snapshot_id,
            "wins": opponent.wins,
            "team": opponent.team,
        }
    return {
        "kind": "bot",
        "bot_team_id": opponent.bot_team_id,
        "difficulty": opponent.difficulty,
        "team": opponent.team,
    }
