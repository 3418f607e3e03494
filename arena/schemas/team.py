from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    # Bounds are checked by the team validator so every violation can be reported at once
    x: int
    y: int


class TeamSetupUnit(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    unit_id: str = Field(alias="unitId")
    tier: int = Field(default=1, ge=1)


class TeamSetup(BaseModel):
    """Parallel-array team shape used at the API boundary: unit i stands on position i."""

    units: list[TeamSetupUnit] = []
    positions: list[Position] = []


class TeamSnapshotUnit(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    unit_id: str = Field(alias="unitId")
    tier: int = Field(default=1, ge=1)
    position: Position


class TeamSnapshot(BaseModel):
    """Canonical stored team shape: each unit carries its own position."""

    units: list[TeamSnapshotUnit] = []

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


class TeamValidationResponse(BaseModel):
    valid: bool
    total_cost: int
    violations: list[str]
