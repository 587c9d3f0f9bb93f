"""
Repositories over the keyed store: meeting cache, token store, alias index.
"""

from meetlink.repositories.aliases import AliasIndex
from meetlink.repositories.meetings import MeetingCache
from meetlink.repositories.tokens import TokenStore

__all__ = ["AliasIndex", "MeetingCache", "TokenStore"]
