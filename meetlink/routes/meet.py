"""
Meeting routes: the main resolver page, fresh meetings and the profile page.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from meetlink.dependencies import get_alias_index, get_current_session, get_resolver
from meetlink.exceptions import MeetLinkError, RotatedTokenError
from meetlink.repositories.aliases import AliasIndex
from meetlink.schemas.session import UserSession
from meetlink.services.resolver import MeetingResolver, Resolution
from meetlink.utils.config import Settings, get_settings
from meetlink.utils.cookies import set_session_cookie
from meetlink.utils.pages import render, render_error, render_redirect

logger = logging.getLogger(__name__)

router = APIRouter(tags=["meetings"])

TRUTHY = {"1", "true", "yes", "on"}


def _failed(exc: Exception) -> MeetLinkError:
    logger.error(f"Failed to create meeting: {str(exc)}", exc_info=True)
    return MeetLinkError(str(exc), title="failed to create meeting")


def _rotated_error(request: Request, exc: RotatedTokenError, settings: Settings) -> Response:
    """Error page that still carries the rotated refresh token into the cookie."""
    logger.error(f"Failed to create meeting after token rotation: {exc.message}")
    response = render_error(request, exc.title, exc.message, exc.status_code, exc.login_url, settings)
    if exc.session is not None:
        set_session_cookie(response, exc.session, settings.COOKIE_SECRET, settings.COOKIE_SECURE)
    return response


def _apply_rotation(response: Response, resolution: Resolution, settings: Settings) -> Response:
    """Carry a rotated refresh token back into the session cookie."""
    if resolution.new_refresh_token and resolution.session is not None:
        set_session_cookie(response, resolution.session, settings.COOKIE_SECRET, settings.COOKIE_SECURE)
    return response


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    owner: Optional[str] = None,
    public: Optional[str] = None,
    session: Optional[UserSession] = Depends(get_current_session),
    resolver: MeetingResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings)
):
    """
    Main page.

    ?owner=<alias> redirects to that user's meeting. Without it, signed-in
    users get their own meeting created if needed; one visible meeting
    redirects, several render a selection page.
    """
    show_public = (public or "").lower() in TRUTHY
    try:
        resolution = await resolver.resolve(session, owner_alias=owner, show_public=show_public)
    except RotatedTokenError as e:
        return _rotated_error(request, e, settings)
    except MeetLinkError:
        raise
    except Exception as e:
        raise _failed(e) from e

    if resolution.is_redirect:
        response = render_redirect(request, resolution.redirect_url, settings)
    else:
        current = resolution.session
        response = render(request, "selection.html", {
            "meetings": resolution.meetings,
            "auto_redirect_url": resolution.auto_redirect_url,
            "signed_in": current is not None,
            "org_user": current is not None and not resolver.policy.is_public(current.email),
            "show_public": show_public,
            "user_alias": resolution.user_alias,
        }, settings=settings)
    return _apply_rotation(response, resolution, settings)


@router.get("/new", response_class=HTMLResponse)
async def new_meeting(
    request: Request,
    session: Optional[UserSession] = Depends(get_current_session),
    resolver: MeetingResolver = Depends(get_resolver),
    settings: Settings = Depends(get_settings)
):
    """Always create a fresh meeting that is not stored in the cache."""
    try:
        resolution = await resolver.resolve_new(session)
    except RotatedTokenError as e:
        return _rotated_error(request, e, settings)
    except MeetLinkError:
        raise
    except Exception as e:
        raise _failed(e) from e

    response = render_redirect(request, resolution.redirect_url, settings)
    return _apply_rotation(response, resolution, settings)


@router.get("/me", response_class=HTMLResponse)
async def me(
    request: Request,
    session: Optional[UserSession] = Depends(get_current_session),
    aliases: AliasIndex = Depends(get_alias_index),
    settings: Settings = Depends(get_settings)
):
    """Show the user's name, email and direct link. Redirects to /login if signed out."""
    if session is None:
        return RedirectResponse(url="/login", status_code=302)

    alias = await aliases.get_or_create(session.email)
    base_url = str(request.base_url).rstrip("/")
    return render(request, "me.html", {
        "name": session.name,
        "email": session.email,
        "alias": alias,
        "direct_link": f"{base_url}/?owner={alias}",
    }, settings=settings)
