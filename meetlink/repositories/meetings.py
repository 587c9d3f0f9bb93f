"""
Meeting cache.

Holds today's meeting per email under meeting:<email>. The scheduled job
empties it once a day; entries are recreated lazily on the next request.
"""

import asyncio
import logging
from typing import List, Optional

from pydantic import ValidationError

from meetlink.adapters.kv import KeyValueStore, iter_prefix
from meetlink.constants import KV_MEETING_PREFIX
from meetlink.schemas.meeting import MeetingEntry

logger = logging.getLogger(__name__)


def parse_entry(key: str, raw: Optional[str]) -> Optional[MeetingEntry]:
    """Decode a cached entry, returning None for missing or corrupt values."""
    if not raw:
        return None
    try:
        return MeetingEntry.model_validate_json(raw)
    except ValidationError:
        logger.warning(f"Dropping unreadable meeting entry {key}")
        return None


class MeetingCache:
    """Keyed-by-email store of today's meetings."""

    def __init__(self, store: KeyValueStore, page_size: Optional[int] = None):
        self.kv = store
        self.page_size = page_size

    @staticmethod
    def key(email: str) -> str:
        return f"{KV_MEETING_PREFIX}{email}"

    async def list(self) -> List[MeetingEntry]:
        """
        List all cached meetings.

        Walks every page under the meeting prefix and fetches each page's
        values concurrently. Corrupt entries are skipped.

        Returns:
            List[MeetingEntry]: All readable entries, in no particular order
        """
        entries: List[MeetingEntry] = []
        async for page in iter_prefix(self.kv, KV_MEETING_PREFIX, self.page_size):
            values = await asyncio.gather(*(self.kv.get(key) for key in page.keys))
            for key, raw in zip(page.keys, values):
                entry = parse_entry(key, raw)
                if entry is not None:
                    entries.append(entry)
        return entries

    async def get(self, email: str) -> Optional[MeetingEntry]:
        """Get the cached meeting for an email."""
        key = self.key(email)
        return parse_entry(key, await self.kv.get(key))

    async def store(self, email: str, entry: MeetingEntry) -> None:
        """Store a meeting entry, replacing any previous one for the email."""
        await self.kv.put(self.key(email), entry.model_dump_json())

    async def clear_all(self) -> int:
        """
        Delete every cached meeting.

        Token and alias keys live under other prefixes and are never touched.

        Returns:
            int: Number of entries deleted
        """
        deleted = 0
        async for page in iter_prefix(self.kv, KV_MEETING_PREFIX, self.page_size):
            await asyncio.gather(*(self.kv.delete(key) for key in page.keys))
            deleted += len(page.keys)
        return deleted
