"""
Custom exceptions for the application.

Every error a request can end in is a MeetLinkError carrying the HTTP status,
the page title and the message that the error page renders.
"""

from typing import Optional


class MeetLinkError(Exception):
    """Base exception for meet-link errors."""

    status_code = 500
    title = "something went wrong"
    login_url: Optional[str] = "/login"

    def __init__(self, message: str = "", title: Optional[str] = None):
        super().__init__(message)
        self.message = message or "Unknown error occurred."
        if title is not None:
            self.title = title


class IdentityError(MeetLinkError):
    """Raised when the OAuth login flow cannot establish who the user is."""

    status_code = 400
    title = "login failed"


class UpstreamError(MeetLinkError):
    """Raised when a Google endpoint answers with a non-success status."""

    status_code = 500
    title = "failed to create meeting"
    operation = "Google API request"

    def __init__(self, status: int, body: str, title: Optional[str] = None):
        self.upstream_status = status
        self.body = body
        super().__init__(f"{self.operation} failed ({status}): {body}", title)


class TokenRefreshError(UpstreamError):
    """Raised when exchanging a refresh token for an access token fails."""

    operation = "Token refresh"


class TokenExchangeError(UpstreamError):
    """Raised when exchanging an authorization code for tokens fails."""

    operation = "Token exchange"
    title = "login failed"


class MeetApiError(UpstreamError):
    """Raised when the Meet API refuses to create a space."""

    operation = "Meet API request"


class RotatedTokenError(MeetLinkError):
    """
    Raised when meeting creation fails after Google rotated the refresh token.

    The rotated token is already in the token store. The old one no longer
    works, so the error page must still carry ``session`` back into the
    cookie when the failing identity is the signed-in user.
    """

    title = "failed to create meeting"

    def __init__(self, cause: Exception, new_refresh_token: str):
        self.cause = cause
        self.new_refresh_token = new_refresh_token
        self.session = None
        message = cause.message if isinstance(cause, MeetLinkError) else str(cause)
        super().__init__(message)
        self.status_code = getattr(cause, "status_code", 500)


class NotFoundError(MeetLinkError):
    """Raised when a direct link points at nothing usable."""

    status_code = 404
    title = "not found"
    login_url = "/home"


class InvalidAliasError(NotFoundError):
    """Raised when an owner alias does not resolve to an email."""

    title = "invalid link"

    def __init__(self, alias: str):
        self.alias = alias
        super().__init__("This direct link is invalid or the user hasn't signed in yet.")


class UserNotFoundError(NotFoundError):
    """Raised when an alias resolves but the owner has no stored token."""

    title = "user not found"

    def __init__(self, email: str):
        self.email = email
        super().__init__("This user's session has expired. They need to sign in again.")


class AliasExhaustedError(MeetLinkError):
    """Raised when no free alias was found within the retry budget."""

    title = "failed to create link"


class SignInRequiredError(MeetLinkError):
    """Raised when an operation needs a session and none is available."""

    status_code = 401
    title = "sign in required"
