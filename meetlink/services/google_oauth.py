"""
Google OAuth client.

Covers the three exchanges the service has with Google's identity endpoints:
building the consent URL, trading an authorization code for tokens, and
trading a refresh token for an access token.

Google may rotate the refresh token on any refresh. When
TokenRefreshResult.new_refresh_token is set, the caller must write it to the
token store and into the session cookie; the old token stops working.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from google.auth import jwt as google_jwt

from meetlink.constants import GOOGLE_AUTH_URL, GOOGLE_TOKEN_URL, SCOPES
from meetlink.exceptions import IdentityError, TokenExchangeError, TokenRefreshError
from meetlink.schemas.token import TokenRefreshResult
from meetlink.services.http import GoogleHttpClient

logger = logging.getLogger(__name__)

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


class GoogleOAuthClient(GoogleHttpClient):
    """Client for Google's OAuth 2.0 endpoints."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0
    ):
        """
        Initialize the client.

        Args:
            client_id: OAuth client ID
            client_secret: OAuth client secret
            http_client: Optional shared httpx client
            timeout: Request timeout in seconds when no client is shared
        """
        super().__init__(http_client, timeout)
        self.client_id = client_id
        self.client_secret = client_secret

    def authorization_url(self, redirect_uri: str, state: str) -> str:
        """
        Build the consent-screen URL.

        Offline access and a forced consent prompt make Google issue a
        refresh token on every login.
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": SCOPES,
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        Args:
            code: Authorization code from the callback
            redirect_uri: The redirect URI used in the initial request

        Returns:
            Dict[str, Any]: Token response (access_token, refresh_token, id_token, ...)

        Raises:
            TokenExchangeError: If Google rejects the exchange
        """
        response = await self._post(
            GOOGLE_TOKEN_URL,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
            headers=FORM_HEADERS,
        )
        if response.status_code >= 400:
            logger.error(f"Token exchange failed: {response.status_code} - {response.text}")
            raise TokenExchangeError(response.status_code, response.text)
        return response.json()

    async def refresh(self, refresh_token: str) -> TokenRefreshResult:
        """
        Exchange a refresh token for an access token.

        Args:
            refresh_token: The refresh token to use

        Returns:
            TokenRefreshResult: Access token, plus the rotated refresh token if Google issued one

        Raises:
            TokenRefreshError: If Google rejects the refresh
        """
        response = await self._post(
            GOOGLE_TOKEN_URL,
            data={
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
            headers=FORM_HEADERS,
        )
        if response.status_code >= 400:
            logger.error(f"Failed to refresh token: {response.status_code} - {response.text}")
            raise TokenRefreshError(response.status_code, response.text)

        data = response.json()
        if not data.get("access_token"):
            raise TokenRefreshError(response.status_code, response.text)

        new_refresh_token = data.get("refresh_token") or None
        if new_refresh_token and new_refresh_token != refresh_token:
            logger.info("Google rotated the refresh token")
        else:
            new_refresh_token = None
        return TokenRefreshResult(access_token=data["access_token"], new_refresh_token=new_refresh_token)


def decode_id_token(id_token: str) -> Dict[str, Any]:
    """
    Decode the claims of an id_token without verifying its signature.

    The token is trusted because it was received directly from Google's
    token endpoint over TLS.

    Raises:
        IdentityError: If the token is malformed or carries no email
    """
    try:
        claims = google_jwt.decode(id_token, verify=False)
    except ValueError as e:
        raise IdentityError(f"Could not read the id_token from Google: {str(e)}")
    if not claims.get("email"):
        raise IdentityError("The id_token from Google has no email. Make sure the OAuth scope includes email.")
    return claims
