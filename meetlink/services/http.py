"""
Shared HTTP plumbing for the Google API clients.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class GoogleHttpClient:
    """Base for clients that talk to Google endpoints over httpx.

    A caller-owned ``httpx.AsyncClient`` may be injected; otherwise a
    short-lived client is opened per request.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0):
        self._client = http_client
        self.timeout = timeout

    async def _post(self, url: str, **kwargs: Any) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, **kwargs)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(url, **kwargs)
