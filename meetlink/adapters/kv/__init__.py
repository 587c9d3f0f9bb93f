"""
Keyed store adapters.

All server-side state lives in a flat string-to-string store with
prefix-scoped, cursor-paginated listing. This module defines the interface;
backends live next to it and are picked by the factory.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Optional


@dataclass
class KeyPage:
    """One bounded page of keys plus the cursor for the next page."""

    keys: List[str] = field(default_factory=list)
    cursor: Optional[str] = None
    list_complete: bool = True


class KeyValueStore(ABC):
    """Abstract base class for keyed store backends."""

    @abstractmethod
    async def init(self) -> None:
        """Open connections and create storage if needed."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get the value stored under a key, or None."""
        pass

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a key. Deleting a missing key is not an error."""
        pass

    @abstractmethod
    async def list_keys(
        self,
        prefix: str,
        cursor: Optional[str] = None,
        limit: Optional[int] = None
    ) -> KeyPage:
        """List one page of keys that start with prefix, in key order.

        Args:
            prefix: Key prefix to match literally
            cursor: Cursor returned with the previous page, None for the first
            limit: Maximum number of keys in the page

        Returns:
            KeyPage: The keys, and a cursor when more pages follow
        """
        pass


async def iter_prefix(store: KeyValueStore, prefix: str, limit: Optional[int] = None) -> AsyncIterator[KeyPage]:
    """Yield every page of keys under a prefix.

    Each call starts a fresh traversal and issues one bounded page request
    at a time.
    """
    cursor = None
    while True:
        page = await store.list_keys(prefix, cursor=cursor, limit=limit)
        yield page
        if page.list_complete or not page.cursor:
            break
        cursor = page.cursor


__all__ = ["KeyPage", "KeyValueStore", "iter_prefix"]
