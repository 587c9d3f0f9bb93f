"""
Alias index.

Maps opaque aliases to emails and back so direct links never carry an
email address:

    alias:<id>          -> email
    email_alias:<email> -> id

Both directions are written together but not atomically; a crash between
the two writes can leave a one-sided mapping. get_or_create reads the
email side first, so a dangling alias:<id> entry is simply never handed out
again.
"""

import asyncio
import logging
import secrets
from typing import Callable, Optional

from meetlink.adapters.kv import KeyValueStore
from meetlink.constants import ALIAS_MAX_ATTEMPTS, KV_ALIAS_PREFIX, KV_EMAIL_TO_ALIAS_PREFIX
from meetlink.exceptions import AliasExhaustedError

logger = logging.getLogger(__name__)


def generate_alias() -> str:
    """Generate an 8-character lowercase hex alias (32 bits of uniform entropy)."""
    return secrets.token_hex(4)


class AliasIndex:
    """Bidirectional alias <-> email mapping."""

    def __init__(
        self,
        store: KeyValueStore,
        alias_factory: Callable[[], str] = generate_alias,
        max_attempts: int = ALIAS_MAX_ATTEMPTS
    ):
        self.kv = store
        self.alias_factory = alias_factory
        self.max_attempts = max_attempts

    async def get_or_create(self, email: str) -> str:
        """
        Get or create the opaque alias for a user.

        Args:
            email: Identity to alias

        Returns:
            str: The existing alias, or a newly minted one

        Raises:
            AliasExhaustedError: If every candidate collided with a taken alias
        """
        existing = await self.kv.get(f"{KV_EMAIL_TO_ALIAS_PREFIX}{email}")
        if existing:
            return existing

        for attempt in range(1, self.max_attempts + 1):
            alias = self.alias_factory()
            if await self.kv.get(f"{KV_ALIAS_PREFIX}{alias}"):
                logger.warning(f"Alias collision on attempt {attempt}/{self.max_attempts}")
                continue

            await asyncio.gather(
                self.kv.put(f"{KV_ALIAS_PREFIX}{alias}", email),
                self.kv.put(f"{KV_EMAIL_TO_ALIAS_PREFIX}{email}", alias),
            )
            logger.info(f"Created alias {alias} for {email}")
            return alias

        raise AliasExhaustedError(
            f"Failed to generate unique alias after {self.max_attempts} attempts"
        )

    async def resolve(self, alias: str) -> Optional[str]:
        """Resolve an alias to an email address, or None if unknown."""
        if not alias:
            return None
        return await self.kv.get(f"{KV_ALIAS_PREFIX}{alias}")
