"""
In-process keyed store.

Used by the test-suite and for local runs with KV_BACKEND=memory. State is
lost when the process exits.
"""

import logging
from typing import Dict, Optional

from meetlink.adapters.kv import KeyPage, KeyValueStore
from meetlink.constants import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed implementation with the same page/cursor protocol as the SQL store."""

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE):
        self.page_size = page_size
        self.data: Dict[str, str] = {}

    async def init(self) -> None:
        logger.info("Using in-memory keyed store")

    async def close(self) -> None:
        pass

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def put(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)

    async def list_keys(self, prefix: str, cursor: Optional[str] = None, limit: Optional[int] = None) -> KeyPage:
        limit = limit or self.page_size
        matching = sorted(
            k for k in self.data
            if k.startswith(prefix) and (cursor is None or k > cursor)
        )
        keys = matching[:limit]
        if len(matching) > limit:
            return KeyPage(keys=keys, cursor=keys[-1], list_complete=False)
        return KeyPage(keys=keys)
