"""Reference battle simulator.

Combat sequence per round:
  1. Every living unit acts once, in descending initiative order
     (player side first on equal initiative, then roster order).
  2. An attack targets a random living enemy and deals
     attack * roll% (roll in 80..120), reduced by the target's armor unless the
     attacker is magic.  Minimum 1 damage.
  3. Damage is accumulated and applied simultaneously at the end of the round,
     so a unit killed this round still gets its swing.
  4. Repeat until one side is eliminated or MAX_COMBAT_ROUNDS is reached.

Verdict: "win" only when the player side outlasts the enemy.  Mutual
elimination is a loss; at the round cap the side with more remaining HP wins,
equal HP counts as a loss.

Tier scaling: each tier above 1 adds TIER_BONUS of base HP and attack.

All randomness comes from random.Random(seed), so a (player, enemy, seed)
triple always produces the same events and verdict.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

from arena.data.units import UnitTemplate, get_unit
from arena.models.battle import BattleResult
from arena.schemas.team import TeamSnapshot, TeamSnapshotUnit

MAX_COMBAT_ROUNDS = 20
TIER_BONUS = 0.5
EVENT_INTERVAL_MS = 100

# Stats used for unit ids missing from the template table
_FALLBACK_HP = 80
_FALLBACK_ATTACK = 12
_FALLBACK_INITIATIVE = 5


# ---------------------------------------------------------------------------
# Combat stats
# ---------------------------------------------------------------------------

@dataclass
class SimulationOutcome:
    events: list[dict[str, Any]] = field(default_factory=list)
    verdict: BattleResult = BattleResult.loss


@dataclass
class CombatUnitStats:
    """Computed combat statistics for one unit on the board."""
    actor_id: str           # "player-0", "enemy-3", ...
    side: str               # "player" or "enemy"
    unit_id: str
    max_hp: int
    current_hp: int
    attack: int
    armor: int
    initiative: int
    magic: bool = False

    @property
    def alive(self) -> bool:
        return self.current_hp > 0


def _scale(value: int, tier: int) -> int:
    return int(round(value * (1 + TIER_BONUS * (tier - 1))))


def get_unit_combat_stats(unit: TeamSnapshotUnit, side: str, index: int) -> CombatUnitStats:
    try:
        template: UnitTemplate | None = get_unit(unit.unit_id)
    except KeyError:
        template = None

    if template is not None:
        hp, attack, armor = template.hp, template.attack, template.armor
        initiative, magic = template.initiative, template.magic
    else:
        hp, attack, armor = _FALLBACK_HP, _FALLBACK_ATTACK, 0
        initiative, magic = _FALLBACK_INITIATIVE, False

    max_hp = _scale(hp, unit.tier)
    return CombatUnitStats(
        actor_id=f"{side}-{index}",
        side=side,
        unit_id=unit.unit_id,
        max_hp=max_hp,
        current_hp=max_hp,
        attack=_scale(attack, unit.tier),
        armor=armor,
        initiative=initiative,
        magic=magic,
    )


def build_side(team: TeamSnapshot, side: str) -> list[CombatUnitStats]:
    return [get_unit_combat_stats(unit, side, i) for i, unit in enumerate(team.units)]


# ---------------------------------------------------------------------------
# Round resolution
# ---------------------------------------------------------------------------

def roll_damage(attacker: CombatUnitStats, defender: CombatUnitStats, roll: int) -> int:
    """Damage for a pre-rolled percentage (80..120)."""
    raw = attacker.attack * roll // 100
    if not attacker.magic:
        raw -= defender.armor
    return max(1, raw)


class _EventLog:
    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def add(
        self,
        event_type: str,
        combat_round: int,
        turn: int,
        actor_id: str | None = None,
        target_id: str | None = None,
        **metadata: Any,
    ) -> None:
        self.events.append({
            "type": event_type,
            "round": combat_round,
            "turn": turn,
            "timestamp": len(self.events) * EVENT_INTERVAL_MS,
            "actorId": actor_id,
            "targetId": target_id,
            "metadata": metadata,
        })


def resolve_combat_round(
    player_side: list[CombatUnitStats],
    enemy_side: list[CombatUnitStats],
    log: _EventLog,
    combat_round: int,
    rng: random.Random,
) -> None:
    """Resolve one round in place."""
    order = sorted(
        [u for u in player_side + enemy_side if u.alive],
        key=lambda u: (-u.initiative, 0 if u.side == "player" else 1),
    )

    damage_map: dict[str, int] = {}
    for turn, actor in enumerate(order, start=1):
        enemies = enemy_side if actor.side == "player" else player_side
        alive = [e for e in enemies if e.alive]
        if not alive:
            break
        target = rng.choice(alive)
        roll = rng.randint(80, 120)
        damage = roll_damage(actor, target, roll)
        damage_map[target.actor_id] = damage_map.get(target.actor_id, 0) + damage
        log.add("attack", combat_round, turn, actor.actor_id, target.actor_id, roll=roll, damage=damage)

    units = {u.actor_id: u for u in player_side + enemy_side}
    turn = len(order) + 1
    for actor_id, total_damage in damage_map.items():
        unit = units[actor_id]
        hp_before = unit.current_hp
        unit.current_hp = max(0, hp_before - total_damage)
        log.add(
            "damage",
            combat_round,
            turn,
            target_id=actor_id,
            hpBefore=hp_before,
            hpAfter=unit.current_hp,
            destroyed=unit.current_hp == 0,
        )
        if unit.current_hp == 0:
            log.add("death", combat_round, turn, target_id=actor_id, unitId=unit.unit_id)


def _sides_both_alive(player_side: list[CombatUnitStats], enemy_side: list[CombatUnitStats]) -> bool:
    return any(u.alive for u in player_side) and any(u.alive for u in enemy_side)


def _remaining_hp(side: list[CombatUnitStats]) -> int:
    return sum(u.current_hp for u in side)


def decide_verdict(player_side: list[CombatUnitStats], enemy_side: list[CombatUnitStats]) -> BattleResult:
    player_hp = _remaining_hp(player_side)
    enemy_hp = _remaining_hp(enemy_side)
    if player_hp > 0 and enemy_hp == 0:
        return BattleResult.win
    if player_hp == 0:
        return BattleResult.loss
    return BattleResult.win if player_hp > enemy_hp else BattleResult.loss


def simulate_battle(player: TeamSnapshot, enemy: TeamSnapshot, seed: int) -> SimulationOutcome:
    """Run a full battle between two rosters."""
    rng = random.Random(seed)
    player_side = build_side(player, "player")
    enemy_side = build_side(enemy, "enemy")
    log = _EventLog()

    log.add("battle_start", 0, 0, playerUnits=len(player_side), enemyUnits=len(enemy_side), seed=seed)

    rounds = 0
    for combat_round in range(1, MAX_COMBAT_ROUNDS + 1):
        if not _sides_both_alive(player_side, enemy_side):
            break
        rounds = combat_round
        resolve_combat_round(player_side, enemy_side, log, combat_round, rng)

    verdict = decide_verdict(player_side, enemy_side)
    log.add(
        "battle_end",
        rounds,
        0,
        winner="player" if verdict == BattleResult.win else "enemy",
        rounds=rounds,
        playerHp=_remaining_hp(player_side),
        enemyHp=_remaining_hp(enemy_side),
    )
    return SimulationOutcome(events=log.events, verdict=verdict)
