"""
Google Meet REST API client.
"""

import logging

from meetlink.constants import MEET_API_URL
from meetlink.exceptions import MeetApiError
from meetlink.services.http import GoogleHttpClient

logger = logging.getLogger(__name__)


class MeetApiClient(GoogleHttpClient):
    """Creates meeting spaces on behalf of a user."""

    async def create_space(self, access_token: str) -> str:
        """
        Create a new Google Meet space.

        Args:
            access_token: Bearer token with the meetings.space.created scope

        Returns:
            str: The meeting URI

        Raises:
            MeetApiError: If the API refuses the request
        """
        response = await self._post(
            MEET_API_URL,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            json={},
        )
        if response.status_code >= 400:
            logger.error(f"Meet API error: {response.status_code} - {response.text}")
            raise MeetApiError(response.status_code, response.text)
        meeting_uri = response.json().get("meetingUri")
        if not meeting_uri:
            raise MeetApiError(response.status_code, response.text)
        return meeting_uri
