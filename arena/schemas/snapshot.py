from datetime import datetime

from pydantic import BaseModel, Field

from arena.schemas.team import TeamSetup, TeamSnapshot
from arena.data.rules import MAX_STAGE, MIN_STAGE


class SnapshotCreate(BaseModel):
    run_id: str
    team: TeamSetup
    # Default to the run's current stage / wins when omitted
    stage: int | None = Field(default=None, ge=MIN_STAGE, le=MAX_STAGE)
    wins: int | None = Field(default=None, ge=0)


class SnapshotResponse(BaseModel):
    id: str
    player_id: str
    run_id: str
    stage: int
    wins: int
    team: TeamSnapshot
    created_at: datetime

    model_config = {"from_attributes": True}


class SnapshotStageStats(BaseModel):
    stage: int
    total_snapshots: int
    avg_wins: float
    max_wins: int
    min_wins: int
