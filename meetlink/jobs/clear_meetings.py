#!/usr/bin/env python
"""
Daily reset of the meeting cache.

Deletes every cached meeting so that each user gets a fresh meeting on their
next visit. Tokens and aliases are left alone. Run once a day from cron or any
scheduler:

    meet-link-clear
    python -m meetlink.jobs.clear_meetings
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from meetlink.adapters.kv import KeyValueStore
from meetlink.adapters.kv.factory import create_store
from meetlink.repositories.meetings import MeetingCache
from meetlink.utils.config import get_settings
from meetlink.utils.logger import setup_logging

logger = logging.getLogger(__name__)


async def clear_meetings(store: KeyValueStore, page_size: Optional[int] = None) -> int:
    """Clear the meeting cache on an open store and log the count."""
    deleted = await MeetingCache(store, page_size=page_size).clear_all()
    logger.info(f"Cron: cleared {deleted} meeting(s)")
    return deleted


async def run() -> int:
    settings = get_settings()
    store = create_store(settings)
    await store.init()
    try:
        return await clear_meetings(store, settings.KV_PAGE_SIZE)
    finally:
        await store.close()


def main(argv=None) -> int:
    """Parse arguments and run the clear."""
    parser = argparse.ArgumentParser(description="Delete every cached meeting.")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    try:
        asyncio.run(run())
    except Exception as e:
        logger.error(f"Failed to clear meetings: {str(e)}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
