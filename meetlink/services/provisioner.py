"""
Meeting provisioner.

Refreshes the owner's access token, creates a Meet space and records the
result. A rotated refresh token is written before the space is requested, so
it survives a Meet API failure; the meeting entry is written afterwards.
The two writes are independent and nothing is rolled back. Callers must
tolerate that partial outcome.
"""

import logging

from meetlink.exceptions import RotatedTokenError
from meetlink.repositories.meetings import MeetingCache
from meetlink.repositories.tokens import TokenStore
from meetlink.schemas.meeting import MeetingEntry, ProvisionResult
from meetlink.schemas.token import TokenRefreshResult
from meetlink.services.google_oauth import GoogleOAuthClient
from meetlink.services.meet_api import MeetApiClient

logger = logging.getLogger(__name__)


class MeetingProvisioner:
    """Creates meetings and keeps the token store in step with rotations."""

    def __init__(
        self,
        oauth: GoogleOAuthClient,
        meet_api: MeetApiClient,
        meetings: MeetingCache,
        tokens: TokenStore
    ):
        self.oauth = oauth
        self.meet_api = meet_api
        self.meetings = meetings
        self.tokens = tokens

    async def create_and_store(self, email: str, name: str, refresh_token: str) -> ProvisionResult:
        """
        Create today's meeting for an identity and cache it.

        Args:
            email: Identity the meeting belongs to
            name: Display name shown on the selection page
            refresh_token: Refresh token of that identity

        Returns:
            ProvisionResult: The cached entry, and the rotated refresh token if any

        Raises:
            RotatedTokenError: If the space could not be created after a rotation
        """
        refreshed = await self._refresh(email, name, refresh_token)
        entry = MeetingEntry(url=await self._create_space(refreshed), name=name, email=email)

        # The space exists and a rotated token must still reach the cookie,
        # so a failed write is reported but does not fail the request.
        try:
            await self.meetings.store(email, entry)
        except Exception as e:
            logger.error(f"Failed to store meeting entry for {email}: {str(e)}", exc_info=True)

        logger.info(f"Created meeting for {email}")
        return ProvisionResult(entry=entry, new_refresh_token=refreshed.new_refresh_token)

    async def create_uncached(self, email: str, name: str, refresh_token: str) -> ProvisionResult:
        """
        Create a one-off meeting that is not written to the cache.

        A rotated refresh token is still persisted.

        Raises:
            RotatedTokenError: If the space could not be created after a rotation
        """
        refreshed = await self._refresh(email, name, refresh_token)
        url = await self._create_space(refreshed)
        logger.info(f"Created uncached meeting for {email}")
        return ProvisionResult(
            entry=MeetingEntry(url=url, name=name, email=email),
            new_refresh_token=refreshed.new_refresh_token
        )

    async def _refresh(self, email: str, name: str, refresh_token: str) -> TokenRefreshResult:
        refreshed = await self.oauth.refresh(refresh_token)
        if refreshed.new_refresh_token:
            try:
                await self.tokens.store(email, refreshed.new_refresh_token, name)
            except Exception as e:
                logger.error(f"Failed to store rotated refresh token for {email}: {str(e)}", exc_info=True)
        return refreshed

    async def _create_space(self, refreshed: TokenRefreshResult) -> str:
        try:
            return await self.meet_api.create_space(refreshed.access_token)
        except Exception as e:
            if refreshed.new_refresh_token:
                raise RotatedTokenError(e, refreshed.new_refresh_token) from e
            raise
