"""
HTML page rendering.

Pages are Jinja2 templates shipped inside the package. Autoescaping is on,
so values passed in the context never need manual escaping.

Routes pass the Settings they received as a dependency. Exception handlers
have no dependency injection and fall back to get_settings().
"""

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from meetlink.utils.config import Settings, get_settings

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
    settings: Optional[Settings] = None
) -> HTMLResponse:
    """Render a template with the branding settings available to every page."""
    settings = settings or get_settings()
    page_context = {
        "app_name": settings.APP_NAME,
        "app_url": settings.APP_URL,
        "contact_url": settings.CONTACT_URL,
    }
    page_context.update(context or {})
    return templates.TemplateResponse(request, name, page_context, status_code=status_code)


def render_redirect(request: Request, url: str, settings: Optional[Settings] = None) -> HTMLResponse:
    """Page that copies the meeting URL to the clipboard and navigates to it."""
    return render(request, "redirect.html", {"meet_url": url}, settings=settings)


def render_error(
    request: Request,
    title: str,
    message: str,
    status_code: int,
    login_url: Optional[str] = "/login",
    settings: Optional[Settings] = None
) -> HTMLResponse:
    """Error page with an optional link back to sign-in."""
    return render(
        request,
        "error.html",
        {"title": title, "message": message, "login_url": login_url},
        status_code=status_code,
        settings=settings,
    )
