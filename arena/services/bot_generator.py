"""Deterministic bot team generator.

Scaling with difficulty d (1-10):
  budget      round(10 + (d - 1) * 20 / 9)       -> 10 at d=1, 30 at d=10
  unit count  ceil(3 + (d - 1) * 4 / 9) .. ceil(4 + (d - 1) * 4 / 9)

Units are picked one per role first (tank, melee, ranged, mage, support,
control) for diversity, then at random within the remaining budget.  Every
team gets at least one tank when the budget allows.  Bots deploy on the
enemy rows (BOT_DEPLOYMENT_ROWS).

The same (difficulty, stage, seed) always yields the same team.
"""

from __future__ import annotations

import math
import random

from arena.data.rules import BOT_DEPLOYMENT_ROWS, GRID_WIDTH, MAX_DIFFICULTY, MIN_DIFFICULTY
from arena.data.units import UnitRole, UnitTemplate, list_units, units_by_role
from arena.schemas.team import Position, TeamSnapshot, TeamSnapshotUnit


def _clamp_difficulty(difficulty: int) -> int:
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, difficulty))


def bot_budget(difficulty: int) -> int:
    d = _clamp_difficulty(difficulty)
    return round(10 + (d - 1) * 20 / 9)


def roll_unit_count(difficulty: int, rng: random.Random) -> int:
    d = _clamp_difficulty(difficulty)
    min_units = math.ceil(3 + (d - 1) * 4 / 9)
    max_units = math.ceil(4 + (d - 1) * 4 / 9)
    return rng.randint(min_units, max_units)


def _select_units(budget: int, target_count: int, rng: random.Random) -> list[UnitTemplate]:
    selected: list[UnitTemplate] = []
    remaining = budget

    for role, role_units in units_by_role().items():
        if len(selected) >= target_count or remaining <= 0:
            break
        affordable = [u for u in role_units if u.cost <= remaining]
        if affordable:
            unit = rng.choice(affordable)
            selected.append(unit)
            remaining -= unit.cost

    all_units = list_units()
    while len(selected) < target_count and remaining > 0:
        affordable = [u for u in all_units if u.cost <= remaining]
        if not affordable:
            break
        unit = rng.choice(affordable)
        selected.append(unit)
        remaining -= unit.cost

    if selected and not any(u.role == UnitRole.tank for u in selected):
        tanks = [u for u in all_units if u.role == UnitRole.tank]
        cheapest = min(tanks, key=lambda u: u.cost)
        if sum(u.cost for u in selected) - selected[0].cost + cheapest.cost <= budget:
            selected[0] = cheapest

    return selected


def _generate_positions(count: int, rng: random.Random) -> list[Position]:
    cells = [(x, y) for y in BOT_DEPLOYMENT_ROWS for x in range(GRID_WIDTH)]
    picked = rng.sample(cells, min(count, len(cells)))
    # More units than deployment cells: the overflow doubles up
    picked += [rng.choice(cells) for _ in range(count - len(picked))]
    return [Position(x=x, y=y) for x, y in picked]


def generate_bot_team(difficulty: int, stage: int, seed: int) -> TeamSnapshot:
    """Build a bot roster for (difficulty, stage) from seed.

    stage does not change the roster today; it is accepted so provisioning can
    key compositions per stage through the seed.
    """
    rng = random.Random(seed)
    budget = bot_budget(difficulty)
    target_count = roll_unit_count(difficulty, rng)

    units = _select_units(budget, target_count, rng)
    positions = _generate_positions(len(units), rng)

    return TeamSnapshot(
        units=[
            TeamSnapshotUnit(unit_id=unit.unit_id, tier=1, position=position)
            for unit, position in zip(units, positions)
        ]
    )


def provisioning_seed(stage: int, difficulty: int, composition: int) -> int:
    return stage * 1000 + difficulty * 100 + composition
