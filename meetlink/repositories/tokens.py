"""
Token store.

Keeps the latest refresh token and display name for every email that has
completed OAuth. Entries live under token:<email> and are never removed by
the daily meeting clear.
"""

import json
import logging
from typing import Optional, Union

from pydantic import ValidationError

from meetlink.adapters.kv import KeyValueStore
from meetlink.constants import KV_TOKEN_PREFIX
from meetlink.schemas.token import StoredToken

logger = logging.getLogger(__name__)


class LegacyToken(str):
    """A stored value from before records carried a name: the bare refresh token."""


def local_part(email: str) -> str:
    """Return the part of an email address before the @."""
    return email.split("@")[0]


def parse_stored_value(raw: str) -> Union[StoredToken, LegacyToken]:
    """
    Decode a token:<email> value.

    Structured records are tried first. Anything that is not a record with a
    refresh token (plain text, or JSON of another shape) is the legacy form.
    """
    try:
        data = json.loads(raw)
    except ValueError:
        return LegacyToken(raw)
    if isinstance(data, dict):
        try:
            return StoredToken.model_validate(data)
        except ValidationError:
            pass
    return LegacyToken(raw)


class TokenStore:
    """Refresh tokens keyed by email."""

    def __init__(self, store: KeyValueStore):
        self.kv = store

    @staticmethod
    def key(email: str) -> str:
        return f"{KV_TOKEN_PREFIX}{email}"

    async def store(self, email: str, refresh_token: str, name: str) -> None:
        """
        Store a user's refresh token and name, overwriting any previous record.

        Args:
            email: Identity key
            refresh_token: Most recent refresh token for the identity
            name: Display name
        """
        record = StoredToken(refresh_token=refresh_token, name=name)
        await self.kv.put(self.key(email), json.dumps(record.model_dump(by_alias=True)))
        logger.debug(f"Stored refresh token for {email}")

    async def get(self, email: str) -> Optional[StoredToken]:
        """
        Retrieve a user's stored token data.

        Returns:
            Optional[StoredToken]: The record, or None if the user never completed OAuth
        """
        raw = await self.kv.get(self.key(email))
        if not raw:
            return None
        parsed = parse_stored_value(raw)
        if isinstance(parsed, LegacyToken):
            logger.info(f"Read legacy token record for {email}")
            return StoredToken(refresh_token=str(parsed), name=local_part(email))
        return parsed
