from datetime import datetime

from pydantic import BaseModel, Field

from arena.models.run import RunStatus
from arena.data.rules import MAX_STAGE, MIN_STAGE


class RunCreate(BaseModel):
    player_id: str = Field(min_length=1, max_length=64)
    stage: int = Field(default=MIN_STAGE, ge=MIN_STAGE, le=MAX_STAGE)
    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)


class RunResponse(BaseModel):
    id: str
    player_id: str
    stage: int
    wins: int
    losses: int
    status: RunStatus
    created_at: datetime

    model_config = {"from_attributes": True}
