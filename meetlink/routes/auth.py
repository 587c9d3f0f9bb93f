"""
Google sign-in routes.

/login sends the visitor to Google's consent screen, /callback turns the
authorization code into a stored refresh token plus a signed session cookie,
/logout drops the cookie.
"""

import asyncio
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from meetlink.constants import OAUTH_STATE_COOKIE, OAUTH_STATE_MAX_AGE
from meetlink.dependencies import get_alias_index, get_oauth_client, get_token_store
from meetlink.exceptions import IdentityError, MeetLinkError
from meetlink.repositories.aliases import AliasIndex
from meetlink.repositories.tokens import TokenStore, local_part
from meetlink.schemas.session import UserSession
from meetlink.services.google_oauth import GoogleOAuthClient, decode_id_token
from meetlink.utils.config import Settings, get_settings
from meetlink.utils.cookies import clear_session_cookie, set_session_cookie
from meetlink.utils.pages import render_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def callback_url(request: Request) -> str:
    return f"{str(request.base_url).rstrip('/')}/callback"


@router.get("/login")
async def login(
    request: Request,
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
    settings: Settings = Depends(get_settings)
):
    """Redirect to the Google OAuth consent screen."""
    state = secrets.token_hex(16)
    response = RedirectResponse(
        url=oauth.authorization_url(callback_url(request), state),
        status_code=302
    )
    response.set_cookie(
        OAUTH_STATE_COOKIE,
        state,
        max_age=OAUTH_STATE_MAX_AGE,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return response


@router.get("/callback")
async def callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
    tokens: TokenStore = Depends(get_token_store),
    aliases: AliasIndex = Depends(get_alias_index),
    settings: Settings = Depends(get_settings)
):
    """
    OAuth callback.

    Exchanges the code for tokens, reads the identity from the id_token,
    stores the refresh token and the user's alias, and sets the session
    cookie. The one-time state cookie is consumed whatever the outcome.
    """
    try:
        session = await complete_login(
            request, code, state, error, oauth, tokens, aliases
        )
    except MeetLinkError as exc:
        logger.warning(f"Login failed: {exc.message}")
        response = render_error(request, exc.title, exc.message, exc.status_code, "/login", settings)
    except Exception as e:
        logger.error(f"OAuth callback error: {str(e)}", exc_info=True)
        response = render_error(request, "login failed", str(e) or "Unknown error.", 500, "/login", settings)
    else:
        response = RedirectResponse(url="/", status_code=302)
        set_session_cookie(response, session, settings.COOKIE_SECRET, settings.COOKIE_SECURE)

    response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
    return response


async def complete_login(
    request: Request,
    code: Optional[str],
    state: Optional[str],
    error: Optional[str],
    oauth: GoogleOAuthClient,
    tokens: TokenStore,
    aliases: AliasIndex
) -> UserSession:
    """
    Validate the callback and establish the user's identity.

    Returns:
        UserSession: Session for the signed-in user

    Raises:
        IdentityError: If Google reported an error, the state does not match,
            or the token response lacks a refresh token or id_token
        TokenExchangeError: If Google rejects the code exchange
    """
    if error:
        raise IdentityError(f"Google returned an error: {error}")
    if not code:
        raise IdentityError("No authorization code received.")

    stored_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not state or not stored_state or not secrets.compare_digest(state.encode(), stored_state.encode()):
        raise IdentityError("Invalid OAuth state. Please try again.")

    data = await oauth.exchange_code(code, callback_url(request))

    if not data.get("refresh_token"):
        raise IdentityError(
            "No refresh token received. Try revoking app access at "
            "myaccount.google.com/permissions and logging in again to re-authorize."
        )
    if not data.get("id_token"):
        raise IdentityError("No id_token received. Make sure the OAuth scope includes openid.")

    claims = decode_id_token(data["id_token"])
    email = claims["email"]
    name = claims.get("name") or local_part(email)

    await asyncio.gather(
        tokens.store(email, data["refresh_token"], name),
        aliases.get_or_create(email),
    )
    logger.info(f"Signed in {email}")
    return UserSession(refresh_token=data["refresh_token"], email=email, name=name)


@router.get("/logout")
async def logout():
    """Clear the session cookie and redirect to /."""
    response = RedirectResponse(url="/", status_code=302)
    clear_session_cookie(response)
    return response
