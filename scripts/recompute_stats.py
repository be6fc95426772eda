#!/usr/bin/env python3
"""Rebuild the derived stats tables from crushes and matches."""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.exceptions import NotFoundError
from app.database import async_session_maker
from app.services import stats_service


async def recompute(season_id: str | None = None) -> None:
    async with async_session_maker() as db:
        try:
            count = await stats_service.recompute(db, season_id)
        except NotFoundError:
            print(f"Season not found: {season_id}")
            return

        stats = await stats_service.get_global_stats(db)
        print(f"Recomputed {count} season(s)")
        print(
            f"Users: {stats.total_users}, crushes: {stats.total_crushes}, "
            f"matches: {stats.total_matches}"
        )


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Stats recompute")
    parser.add_argument(
        "--season",
        default=None,
        help="Only recompute this season (default: all seasons)",
    )

    args = parser.parse_args()
    asyncio.run(recompute(args.season))


if __name__ == "__main__":
    main()
