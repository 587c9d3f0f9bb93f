"""
Error handling for the application.

Every failure ends in a rendered HTML page: domain errors carry their own
status and title, anything unexpected becomes a generic 500 page.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import RedirectResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from meetlink.exceptions import MeetLinkError, SignInRequiredError, UpstreamError
from meetlink.utils.pages import render_error

logger = logging.getLogger(__name__)


def add_error_handlers(app: FastAPI) -> None:
    """
    Add error handlers to the FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(SignInRequiredError)
    async def sign_in_required_handler(request: Request, exc: SignInRequiredError) -> Response:
        """Send visitors without a session to the login flow."""
        return RedirectResponse(url="/login", status_code=status.HTTP_302_FOUND)

    @app.exception_handler(MeetLinkError)
    async def meet_link_error_handler(request: Request, exc: MeetLinkError) -> Response:
        """Render domain errors with their own status code."""
        if isinstance(exc, UpstreamError) or exc.status_code >= 500:
            logger.error(f"{exc.title}: {exc.message}")
        else:
            logger.warning(f"{exc.title}: {exc.message} (status_code={exc.status_code})")
        return render_error(request, exc.title, exc.message, exc.status_code, exc.login_url)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
        """Handle HTTP exceptions."""
        logger.warning(f"HTTP exception: {exc.detail} (status_code={exc.status_code})")
        title = "not found" if exc.status_code == 404 else "something went wrong"
        return render_error(request, title, str(exc.detail), exc.status_code, "/home")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> Response:
        """Handle all other exceptions."""
        logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
        return render_error(
            request,
            "something went wrong",
            "An unexpected error occurred.",
            status.HTTP_500_INTERNAL_SERVER_ERROR
        )
