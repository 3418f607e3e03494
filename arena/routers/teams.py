from fastapi import APIRouter

from arena.schemas.team import TeamSetup, TeamValidationResponse
from arena.services.team_validator import total_team_cost, validate_team

router = APIRouter(prefix="/teams", tags=["teams"])


@router.post("/validate", response_model=TeamValidationResponse)
async def validate_team_endpoint(body: TeamSetup):
    """Check a team against the composition rules without saving anything."""
    violations = validate_team(body)
    return TeamValidationResponse(
        valid=not violations,
        total_cost=total_team_cost(body.units),
        violations=violations,
    )
