from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel

from arena.models.battle import BattleResult
from arena.schemas.team import TeamSnapshot


class OpponentResponse(BaseModel):
    kind: Literal["snapshot", "bot"]
    snapshot_id: Optional[str] = None
    bot_team_id: Optional[str] = None
    wins: Optional[int] = None
    difficulty: Optional[int] = None
    team: TeamSnapshot


class BattleResponse(BaseModel):
    id: str
    run_id: str
    enemy_snapshot_id: Optional[str]
    seed: int
    result: BattleResult
    events: Optional[list[dict[str, Any]]]
    is_player_battle: bool
    event_count: int
    created_at: datetime


class StartBattleResponse(BaseModel):
    battle: BattleResponse
    opponent: OpponentResponse


class BattleStatsResponse(BaseModel):
    total_battles: int
    wins: int
    losses: int
    pending: int
    win_rate: int
    avg_event_count: int


class ReplayVerificationResponse(BaseModel):
    battle_id: str
    matches: bool
