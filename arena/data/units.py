"""Static unit templates and the default cost provider.

Roles:
  TANK        - High HP and armor, low damage
  MELEE_DPS   - High damage, medium survivability
  RANGED_DPS  - Damage from the back rows
  MAGE        - Magic damage, ignores armor
  SUPPORT     - Heals / buffs; weak on their own
  CONTROL     - Disruption; fragile

Costs are balance data owned by game design.  The matchmaking engine only
looks them up through a cost_of(unit_id) callable, and unknown ids are
priced at DEFAULT_UNIT_COST instead of being rejected.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


DEFAULT_UNIT_COST = 5


class UnitRole(str, enum.Enum):
    tank = "tank"
    melee_dps = "melee_dps"
    ranged_dps = "ranged_dps"
    mage = "mage"
    support = "support"
    control = "control"


@dataclass(frozen=True)
class UnitTemplate:
    """Definition of a single recruitable unit."""
    unit_id: str
    name: str
    role: UnitRole
    cost: int
    # Combat (tier 1 values)
    hp: int
    attack: int
    armor: int = 0
    initiative: int = 5
    magic: bool = False  # magic attacks ignore armor


_UNITS: list[UnitTemplate] = [
    UnitTemplate("knight", "Knight", UnitRole.tank, cost=5, hp=120, attack=12, armor=8, initiative=4),
    UnitTemplate("guardian", "Guardian", UnitRole.tank, cost=6, hp=150, attack=10, armor=10, initiative=3),
    UnitTemplate("rogue", "Rogue", UnitRole.melee_dps, cost=4, hp=70, attack=20, armor=2, initiative=9),
    UnitTemplate("berserker", "Berserker", UnitRole.melee_dps, cost=6, hp=100, attack=24, armor=3, initiative=6),
    UnitTemplate("archer", "Archer", UnitRole.ranged_dps, cost=4, hp=60, attack=16, armor=1, initiative=7),
    UnitTemplate("crossbowman", "Crossbowman", UnitRole.ranged_dps, cost=5, hp=65, attack=22, armor=2, initiative=5),
    UnitTemplate("mage", "Mage", UnitRole.mage, cost=5, hp=55, attack=18, initiative=6, magic=True),
    UnitTemplate("warlock", "Warlock", UnitRole.mage, cost=7, hp=60, attack=26, initiative=5, magic=True),
    UnitTemplate("priest", "Priest", UnitRole.support, cost=4, hp=60, attack=8, armor=1, initiative=5),
    UnitTemplate("bard", "Bard", UnitRole.support, cost=3, hp=50, attack=6, armor=1, initiative=8),
    UnitTemplate("enchanter", "Enchanter", UnitRole.control, cost=6, hp=55, attack=12, initiative=7, magic=True),
]

UNIT_TEMPLATES: dict[str, UnitTemplate] = {u.unit_id: u for u in _UNITS}


def get_unit(unit_id: str) -> UnitTemplate:
    """Return the template for unit_id.  Raises KeyError if unknown."""
    return UNIT_TEMPLATES[unit_id]


def list_units() -> list[UnitTemplate]:
    return list(_UNITS)


def units_by_role() -> dict[UnitRole, list[UnitTemplate]]:
    grouped: dict[UnitRole, list[UnitTemplate]] = {role: [] for role in UnitRole}
    for unit in _UNITS:
        grouped[unit.role].append(unit)
    return grouped


def unit_cost(unit_id: str) -> int:
    """Default cost provider: template cost, or DEFAULT_UNIT_COST for unknown ids."""
    template = UNIT_TEMPLATES.get(unit_id)
    return template.cost if template is not None else DEFAULT_UNIT_COST
