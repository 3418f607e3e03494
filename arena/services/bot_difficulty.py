"""Bot difficulty scaling: labels and progression banding for bot teams.

Win bands (difficulty required for a player with N wins):
  0-2 wins  -> difficulty <= 3
  3-5 wins  -> difficulty >= 4
  6+ wins   -> difficulty >= 7

The bands are one-sided: the upper bands have no ceiling, so a difficulty 10
bot is in band for every player with 3 or more wins.  This matches the live
matchmaking policy and is kept as-is.
"""

from __future__ import annotations

from typing import Any

from arena.data.rules import MAX_DIFFICULTY
from arena.data.units import unit_cost
from arena.models.bot_team import BotTeam
from arena.schemas.team import TeamSnapshot
from arena.services.team_validator import CostProvider, total_team_cost


def difficulty_label(difficulty: int) -> str:
    if difficulty <= 2:
        return "Easy"
    if difficulty <= 4:
        return "Normal"
    if difficulty <= 6:
        return "Hard"
    if difficulty <= 8:
        return "Very Hard"
    return "Nightmare"


def is_difficulty_in_band(difficulty: int, player_wins: int) -> bool:
    if player_wins <= 2:
        return difficulty <= 3
    if player_wins <= 5:
        return difficulty >= 4
    return difficulty >= 7


def is_appropriate(bot: BotTeam, player_stage: int, player_wins: int) -> bool:
    """Stage must match exactly; difficulty must sit in the player's win band."""
    if bot.stage != player_stage:
        return False
    return is_difficulty_in_band(bot.difficulty, player_wins)


def target_difficulty(player_wins: int) -> int:
    """Preferred difficulty when several in-band bots are available."""
    return min(MAX_DIFFICULTY, 1 + player_wins)


def bot_unit_count(bot: BotTeam) -> int:
    return len((bot.team or {}).get("units", []))


def bot_team_cost(bot: BotTeam, cost_of: CostProvider = unit_cost) -> int:
    team = TeamSnapshot.model_validate(bot.team or {"units": []})
    return total_team_cost(team.units, cost_of)


def bot_team_summary(bot: BotTeam) -> dict[str, Any]:
    return {
        "id": bot.id,
        "stage": bot.stage,
        "difficulty": bot.difficulty,
        "difficulty_label": difficulty_label(bot.difficulty),
        "unit_count": bot_unit_count(bot),
        "created_at": bot.created_at,
    }
