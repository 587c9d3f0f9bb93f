"""
Schemas for stored and refreshed OAuth tokens.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StoredToken(BaseModel):
    """Data stored under token:<email>. Survives the daily meeting clear."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., alias="refreshToken", min_length=1)
    name: str = ""


class TokenRefreshResult(BaseModel):
    """Result of a token refresh, including the new refresh token if Google rotated it."""

    access_token: str
    new_refresh_token: Optional[str] = None
