import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from arena.data.rules import MAX_DIFFICULTY, MAX_STAGE, MIN_DIFFICULTY, MIN_STAGE
from arena.data.units import unit_cost
from arena.errors import InvalidTeamComposition
from arena.models.bot_team import BotTeam
from arena.schemas.team import TeamSnapshot
from arena.services.bot_generator import generate_bot_team, provisioning_seed
from arena.services.team_validator import CostProvider, validate_team_snapshot

logger = logging.getLogger(__name__)

COMPOSITIONS_PER_DIFFICULTY = 5


def _check_ranges(stage: int, difficulty: int) -> None:
    if stage < MIN_STAGE or stage > MAX_STAGE:
        raise ValueError(f"Stage must be between {MIN_STAGE} and {MAX_STAGE}")
    if difficulty < MIN_DIFFICULTY or difficulty > MAX_DIFFICULTY:
        raise ValueError(f"Difficulty must be between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}")


def build_bot_team(
    stage: int, difficulty: int, team: TeamSnapshot, cost_of: CostProvider = unit_cost
) -> BotTeam:
    """Validate and build (but do not add) a BotTeam row."""
    _check_ranges(stage, difficulty)
    violations = validate_team_snapshot(team, cost_of)
    if violations:
        raise InvalidTeamComposition(violations)
    return BotTeam(stage=stage, difficulty=difficulty, team=team.to_json())


async def create_bot_team(
    db: AsyncSession, stage: int, difficulty: int, team: TeamSnapshot, cost_of: CostProvider = unit_cost
) -> BotTeam:
    bot = build_bot_team(stage, difficulty, team, cost_of)
    db.add(bot)
    await db.commit()
    await db.refresh(bot)
    return bot


async def list_bot_teams_for_stage(db: AsyncSession, stage: int) -> list[BotTeam]:
    result = await db.execute(
        select(BotTeam)
        .where(BotTeam.stage == stage)
        .order_by(BotTeam.difficulty, BotTeam.created_at.desc(), BotTeam.id)
    )
    return list(result.scalars().all())


async def get_stage_coverage(db: AsyncSession, stage: int) -> dict:
    """Number of bot teams per difficulty (1-10) at a stage."""
    bots = await list_bot_teams_for_stage(db, stage)
    difficulties = {d: 0 for d in range(MIN_DIFFICULTY, MAX_DIFFICULTY + 1)}
    for bot in bots:
        difficulties[bot.difficulty] = difficulties.get(bot.difficulty, 0) + 1
    return {"stage": stage, "total_teams": len(bots), "difficulties": difficulties}


async def seed_bot_teams(
    db: AsyncSession,
    stages: range = range(MIN_STAGE, MAX_STAGE + 1),
    difficulties: range = range(MIN_DIFFICULTY, MAX_DIFFICULTY + 1),
    compositions: int = COMPOSITIONS_PER_DIFFICULTY,
    replace: bool = True,
) -> int:
    """Provision generated bot teams for every (stage, difficulty) pair.

    With replace=True existing bot teams are removed first.  Generated teams
    that fail validation are skipped and logged.  Returns the number saved.
    """
    if replace:
        await db.execute(delete(BotTeam))

    saved = 0
    skipped = 0
    for stage in stages:
        for difficulty in difficulties:
            for composition in range(compositions):
                team = generate_bot_team(
                    difficulty, stage, provisioning_seed(stage, difficulty, composition)
                )
                try:
                    bot = build_bot_team(stage, difficulty, team)
                except InvalidTeamComposition as exc:
                    skipped += 1
                    logger.warning(
                        "Skipping generated bot team (stage=%s, difficulty=%s, composition=%s): %s",
                        stage,
                        difficulty,
                        composition,
                        exc,
                    )
                    continue
                db.add(bot)
                saved += 1

    await db.commit()
    logger.info("Seeded %s bot teams (%s skipped)", saved, skipped)
    return saved
