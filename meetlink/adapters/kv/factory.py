"""
Keyed store factory.

Creates the backend named by the KV_BACKEND setting and keeps a single
instance per process.
"""

import logging
from typing import Optional

from meetlink.adapters.kv import KeyValueStore
from meetlink.adapters.kv.memory import MemoryKeyValueStore
from meetlink.adapters.kv.sql import SQLKeyValueStore
from meetlink.utils.config import Settings

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> KeyValueStore:
    """Build an uninitialized store for the configured backend.

    Raises:
        ValueError: If KV_BACKEND names an unknown backend
    """
    backend = settings.KV_BACKEND.lower()
    if backend == "memory":
        return MemoryKeyValueStore(page_size=settings.KV_PAGE_SIZE)
    if backend == "sql":
        return SQLKeyValueStore(settings.DATABASE_URL, page_size=settings.KV_PAGE_SIZE)
    raise ValueError(f"Unknown KV_BACKEND: {settings.KV_BACKEND}")


class KeyValueStoreFactory:
    """Factory for the process-wide keyed store."""

    _instance: Optional[KeyValueStore] = None

    @classmethod
    async def get_store(cls, settings: Settings) -> KeyValueStore:
        """Get the keyed store, creating and initializing it on first use."""
        if cls._instance is None:
            store = create_store(settings)
            await store.init()
            cls._instance = store
            logger.info(f"Using {type(store).__name__} for keyed storage")
        return cls._instance

    @classmethod
    async def close_store(cls) -> None:
        """Close the current store if it exists."""
        if cls._instance:
            await cls._instance.close()
            cls._instance = None
            logger.info("Closed keyed store")
