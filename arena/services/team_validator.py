"""Team validator: structural and budget checks for team compositions.

A team is valid when all of the following hold:
  1. units and positions have the same length (unit i stands on position i)
  2. there is at least one unit
  3. the summed unit cost is at most TEAM_BUDGET
  4. every position lies on the GRID_WIDTH x GRID_HEIGHT battlefield

validate_team() reports every broken rule rather than stopping at the first,
so callers can show the whole list.  Nothing here touches the database.
"""

from __future__ import annotations

from typing import Callable, Iterable

from arena.data.rules import GRID_HEIGHT, GRID_WIDTH, TEAM_BUDGET
from arena.data.units import unit_cost
from arena.errors import InvalidTeamComposition
from arena.schemas.team import (
    Position,
    TeamSetup,
    TeamSetupUnit,
    TeamSnapshot,
    TeamSnapshotUnit,
)

CostProvider = Callable[[str], int]


def is_on_grid(position: Position) -> bool:
    return 0 <= position.x < GRID_WIDTH and 0 <= position.y < GRID_HEIGHT


def total_team_cost(units: Iterable[TeamSetupUnit | TeamSnapshotUnit], cost_of: CostProvider = unit_cost) -> int:
    return sum(cost_of(u.unit_id) for u in units)


def validate_team(team: TeamSetup, cost_of: CostProvider = unit_cost) -> list[str]:
    """Return the list of violated rules; an empty list means the team is valid."""
    violations: list[str] = []

    if len(team.units) != len(team.positions):
        violations.append(
            f"Units ({len(team.units)}) and positions ({len(team.positions)}) must have the same length"
        )

    if not team.units:
        violations.append("Team must have at least one unit")

    total = total_team_cost(team.units, cost_of)
    if total > TEAM_BUDGET:
        violations.append(f"Team cost {total} exceeds budget of {TEAM_BUDGET}")

    for index, position in enumerate(team.positions):
        if not is_on_grid(position):
            violations.append(
                f"Position {index} ({position.x}, {position.y}) is outside the "
                f"{GRID_WIDTH}x{GRID_HEIGHT} grid"
            )

    return violations


def is_valid_team(team: TeamSetup, cost_of: CostProvider = unit_cost) -> bool:
    return not validate_team(team, cost_of)


def ensure_valid_team(team: TeamSetup, cost_of: CostProvider = unit_cost) -> None:
    """Raise InvalidTeamComposition carrying every violation if the team is invalid."""
    violations = validate_team(team, cost_of)
    if violations:
        raise InvalidTeamComposition(violations)


# ---------------------------------------------------------------------------
# Shape conversion (TeamSetup <-> TeamSnapshot)
# ---------------------------------------------------------------------------

def team_setup_to_snapshot(setup: TeamSetup) -> TeamSnapshot:
    """Embed each position into its unit.  Callers validate first; zip stops at the shorter list."""
    return TeamSnapshot(
        units=[
            TeamSnapshotUnit(unit_id=unit.unit_id, tier=unit.tier, position=position)
            for unit, position in zip(setup.units, setup.positions)
        ]
    )


def team_snapshot_to_setup(snapshot: TeamSnapshot) -> TeamSetup:
    return TeamSetup(
        units=[TeamSetupUnit(unit_id=u.unit_id, tier=u.tier) for u in snapshot.units],
        positions=[u.position for u in snapshot.units],
    )


def validate_team_snapshot(snapshot: TeamSnapshot, cost_of: CostProvider = unit_cost) -> list[str]:
    return validate_team(team_snapshot_to_setup(snapshot), cost_of)
