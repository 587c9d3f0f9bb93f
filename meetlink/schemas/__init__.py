"""
Pydantic models for the identity, token and meeting records.
"""

from meetlink.schemas.meeting import MeetingEntry, MeetingChoice, ProvisionResult
from meetlink.schemas.session import UserSession
from meetlink.schemas.token import StoredToken, TokenRefreshResult

__all__ = [
    "MeetingEntry",
    "MeetingChoice",
    "ProvisionResult",
    "UserSession",
    "StoredToken",
    "TokenRefreshResult",
]
