"""
Schemas for cached meetings.
"""

from typing import Optional

from pydantic import BaseModel, Field


class MeetingEntry(BaseModel):
    """Today's meeting for one identity, stored under meeting:<email>."""

    url: str = Field(..., min_length=1)
    name: str = ""
    email: str = Field(..., min_length=1)


class MeetingChoice(BaseModel):
    """Client-safe view of a meeting for the selection page. Carries no email."""

    url: str
    name: str
    is_current_user: bool = False


class ProvisionResult(BaseModel):
    """A freshly created meeting and the rotated refresh token, if any."""

    entry: MeetingEntry
    new_refresh_token: Optional[str] = None
