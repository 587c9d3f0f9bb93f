"""
Visibility policy for the meeting list.

Emails on free consumer domains (gmail.com by default) are "public". The
fallback identity used when nobody is signed in is public too. Everyone else
belongs to an organizational domain.
"""

from typing import Iterable, List, Optional

from meetlink.constants import DEFAULT_USER_KEY
from meetlink.schemas.meeting import MeetingEntry


def email_domain(email: str) -> str:
    """Lowercased domain of an email address, empty if there is none."""
    _, sep, domain = email.rpartition("@")
    return domain.lower() if sep else ""


class VisibilityPolicy:
    """Decides which cached meetings a viewer sees by default."""

    def __init__(self, public_domains: Iterable[str]):
        self.public_domains = {d.lower() for d in public_domains}

    def is_public(self, email: str) -> bool:
        return email == DEFAULT_USER_KEY or email_domain(email) in self.public_domains

    def matches(self, entry: MeetingEntry, viewer_email: Optional[str], show_public: bool = False) -> bool:
        """
        Check whether one meeting is visible to a viewer.

        Args:
            entry: Cached meeting
            viewer_email: Signed-in email, None when signed out
            show_public: Organizational viewers asked for public meetings instead
        """
        if viewer_email is None or self.is_public(viewer_email) or show_public:
            return self.is_public(entry.email)
        return email_domain(entry.email) == email_domain(viewer_email)

    def filter(
        self,
        meetings: Iterable[MeetingEntry],
        viewer_email: Optional[str],
        show_public: bool = False
    ) -> List[MeetingEntry]:
        """Return the meetings visible to a viewer, preserving order."""
        return [m for m in meetings if self.matches(m, viewer_email, show_public)]
