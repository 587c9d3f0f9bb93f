"""
Session carried inside the signed session cookie.
"""

from pydantic import BaseModel, ConfigDict, Field


class UserSession(BaseModel):
    """Identity of the signed-in user. Never stored server-side."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., alias="refreshToken", min_length=1)
    email: str = Field(..., min_length=1)
    name: str = ""

    def with_refresh_token(self, refresh_token: str) -> "UserSession":
        """Return a copy carrying a rotated refresh token."""
        return self.model_copy(update={"refresh_token": refresh_token})
