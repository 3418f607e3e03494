from datetime import datetime

from pydantic import BaseModel

from arena.schemas.team import TeamSnapshot


class BotTeamResponse(BaseModel):
    id: str
    stage: int
    difficulty: int
    difficulty_label: str
    unit_count: int
    team: TeamSnapshot
    created_at: datetime


class StageCoverageResponse(BaseModel):
    stage: int
    total_teams: int
    difficulties: dict[int, int]
