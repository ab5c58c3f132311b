#!/usr/bin/env python3
"""Admin script to mark past-due tasks as overdue.

Usage:
    uv run python scripts/sweep_overdue.py
    uv run python scripts/sweep_overdue.py --owner-id <user_id>
"""

import argparse
import asyncio
import logging

from src.core.db_client import close_connection, init_db
from src.modules.tasks.status import sweep_overdue


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


async def run(owner_id: str | None) -> int:
    """Run one overdue sweep and return how many tasks changed."""
    await init_db()
    try:
        return await sweep_overdue(owner_id=owner_id)
    finally:
        await close_connection()


def main() -> None:
    parser = argparse.ArgumentParser(description="Mark past-due, non-completed tasks as overdue.")
    parser.add_argument("--owner-id", default=None, help="Only sweep this user's tasks")
    args = parser.parse_args()

    affected = asyncio.run(run(args.owner_id))
    scope = f"owner {args.owner_id}" if args.owner_id else "all owners"
    logger.info(f"Marked {affected} task(s) overdue for {scope}")


if __name__ == "__main__":
    main()
