#!/usr/bin/env python3
"""
Provision bot teams for every stage and difficulty.

Generates COMPOSITIONS_PER_DIFFICULTY teams for each (stage 1-9,
difficulty 1-10) pair with deterministic seeds, validates each one and stores
it in the bot_teams table.  Existing bot teams are replaced unless --append is
given.

Usage:
  python3 scripts/seed_bot_teams.py [--compositions 5] [--append] [--create-tables]

The database is taken from ARENA_DATABASE_URL (see arena/config.py).
"""
import argparse
import asyncio
import logging

from arena.config import settings
from arena.data.rules import MAX_STAGE, MIN_STAGE
from arena.database import AsyncSessionLocal, engine
from arena.models.base import Base
from arena.services.bot_team_service import COMPOSITIONS_PER_DIFFICULTY, get_stage_coverage, seed_bot_teams

logger = logging.getLogger("seed_bot_teams")


async def run(compositions: int, replace: bool, create_tables: bool) -> int:
    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        saved = await seed_bot_teams(session, compositions=compositions, replace=replace)
        for stage in range(MIN_STAGE, MAX_STAGE + 1):
            coverage = await get_stage_coverage(session, stage)
            gaps = [d for d, count in coverage["difficulties"].items() if count == 0]
            if gaps:
                logger.warning("Stage %s has no bot teams for difficulties %s", stage, gaps)
            else:
                logger.info("Stage %s: %s bot teams", stage, coverage["total_teams"])

    await engine.dispose()
    return saved


def main():
    ap = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    ap.add_argument('--compositions', type=int, default=COMPOSITIONS_PER_DIFFICULTY,
                    help='Teams per (stage, difficulty) pair')
    ap.add_argument('--append', action='store_true', help='Keep existing bot teams')
    ap.add_argument('--create-tables', action='store_true',
                    help='Create missing tables first (for a fresh SQLite file)')
    args = ap.parse_args()

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    saved = asyncio.run(run(args.compositions, replace=not args.append, create_tables=args.create_tables))
    print(f"Seeded {saved} bot teams into {settings.database_url}")


if __name__ == '__main__':
    main()
