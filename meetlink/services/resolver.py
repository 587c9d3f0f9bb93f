"""
Request resolver for the main meeting page.

Decides, for one request, which meeting the visitor should land on:

* ``?owner=<alias>`` direct links resolve the alias, reuse or create the
  owner's meeting with the owner's stored token, and always redirect. No
  visibility filtering applies.
* Signed-out visitors see public meetings only.
* Signed-in visitors get their own meeting created on first visit and see the
  meetings visible under the visibility policy.

Exactly one visible meeting always short-circuits to a redirect.

The resolver does not render anything. It returns a Resolution that carries
the (possibly rotated) session so the route can rewrite the cookie.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel

from meetlink.constants import DEFAULT_USER_KEY, DEFAULT_USER_NAME
from meetlink.exceptions import (
    InvalidAliasError,
    RotatedTokenError,
    SignInRequiredError,
    UserNotFoundError,
)
from meetlink.repositories.aliases import AliasIndex
from meetlink.repositories.meetings import MeetingCache
from meetlink.repositories.tokens import TokenStore
from meetlink.schemas.meeting import MeetingChoice, MeetingEntry
from meetlink.schemas.session import UserSession
from meetlink.services.provisioner import MeetingProvisioner
from meetlink.services.visibility import VisibilityPolicy

logger = logging.getLogger(__name__)


class Resolution(BaseModel):
    """Outcome of resolving one request."""

    redirect_url: Optional[str] = None
    meetings: List[MeetingChoice] = []
    auto_redirect: bool = False
    user_alias: Optional[str] = None
    session: Optional[UserSession] = None
    new_refresh_token: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_url is not None

    @property
    def auto_redirect_url(self) -> Optional[str]:
        if not self.auto_redirect:
            return None
        for meeting in self.meetings:
            if meeting.is_current_user:
                return meeting.url
        return None


def to_choices(meetings: List[MeetingEntry], current_email: Optional[str]) -> List[MeetingChoice]:
    """Strip emails before meetings are handed to the page."""
    return [
        MeetingChoice(
            url=m.url,
            name=m.name,
            is_current_user=current_email is not None and m.email == current_email
        )
        for m in meetings
    ]


class MeetingResolver:
    """Per-request decision logic over the cache, token store and alias index."""

    def __init__(
        self,
        meetings: MeetingCache,
        tokens: TokenStore,
        aliases: AliasIndex,
        provisioner: MeetingProvisioner,
        policy: VisibilityPolicy,
        fallback_refresh_token: Optional[str] = None
    ):
        self.meetings = meetings
        self.tokens = tokens
        self.aliases = aliases
        self.provisioner = provisioner
        self.policy = policy
        self.fallback_refresh_token = fallback_refresh_token or None

    async def resolve(
        self,
        session: Optional[UserSession],
        owner_alias: Optional[str] = None,
        show_public: bool = False
    ) -> Resolution:
        """
        Resolve the main page for one request.

        Args:
            session: Session from the cookie, None when signed out
            owner_alias: Alias from a direct link
            show_public: Organizational users asked to see public meetings

        Returns:
            Resolution: A redirect or a selection

        Raises:
            InvalidAliasError: If the alias is unknown
            UserNotFoundError: If the alias owner has no stored token
        """
        if owner_alias:
            return await self.resolve_direct_link(owner_alias, session)

        meetings = await self.meetings.list()
        if session is None:
            return await self._resolve_signed_out(meetings)
        return await self._resolve_signed_in(session, meetings, show_public)

    async def resolve_direct_link(self, alias: str, session: Optional[UserSession] = None) -> Resolution:
        """Redirect to the alias owner's meeting, creating it with the owner's token."""
        owner_email = await self.aliases.resolve(alias)
        if not owner_email:
            raise InvalidAliasError(alias)

        stored = await self.tokens.get(owner_email)
        if stored is None:
            raise UserNotFoundError(owner_email)

        existing = await self.meetings.get(owner_email)
        if existing is not None:
            return Resolution(redirect_url=existing.url, session=session)

        # A visitor's cookie holds a different identity and is left alone; an
        # owner opening their own link gets the rotated token back.
        own_link = session is not None and session.email == owner_email
        try:
            result = await self.provisioner.create_and_store(owner_email, stored.name, stored.refresh_token)
        except RotatedTokenError as e:
            if own_link:
                e.session = session.with_refresh_token(e.new_refresh_token)
            raise

        if own_link and result.new_refresh_token:
            return Resolution(
                redirect_url=result.entry.url,
                session=session.with_refresh_token(result.new_refresh_token),
                new_refresh_token=result.new_refresh_token
            )
        return Resolution(redirect_url=result.entry.url, session=session)

    async def fallback_token(self) -> Optional[str]:
        """
        Refresh token of the fallback identity.

        A token Google rotated is stored under the fallback key and takes over
        from the configured one, which stops working once rotated.
        """
        if not self.fallback_refresh_token:
            return None
        stored = await self.tokens.get(DEFAULT_USER_KEY)
        if stored is not None:
            return stored.refresh_token
        return self.fallback_refresh_token

    async def _resolve_signed_out(self, meetings: List[MeetingEntry]) -> Resolution:
        visible = self.policy.filter(meetings, None)

        if not visible:
            refresh_token = await self.fallback_token()
            if refresh_token:
                result = await self.provisioner.create_and_store(
                    DEFAULT_USER_KEY, DEFAULT_USER_NAME, refresh_token
                )
                if result.new_refresh_token:
                    logger.info("Fallback refresh token was rotated and stored")
                visible.append(result.entry)

        if len(visible) == 1:
            return Resolution(redirect_url=visible[0].url)
        return Resolution(meetings=to_choices(visible, None))

    async def _resolve_signed_in(
        self,
        session: UserSession,
        meetings: List[MeetingEntry],
        show_public: bool
    ) -> Resolution:
        # Looked up before any token is spent so an alias failure cannot
        # strand a rotated refresh token outside the cookie.
        user_alias = await self.aliases.get_or_create(session.email)

        visible = self.policy.filter(meetings, session.email, show_public)
        new_refresh_token = None

        if not any(m.email == session.email for m in meetings):
            try:
                result = await self.provisioner.create_and_store(
                    session.email, session.name, session.refresh_token
                )
            except RotatedTokenError as e:
                e.session = session.with_refresh_token(e.new_refresh_token)
                raise
            if result.new_refresh_token:
                new_refresh_token = result.new_refresh_token
                session = session.with_refresh_token(new_refresh_token)
            if self.policy.matches(result.entry, session.email, show_public):
                visible.append(result.entry)

        if len(visible) == 1:
            return Resolution(
                redirect_url=visible[0].url,
                session=session,
                new_refresh_token=new_refresh_token
            )
        return Resolution(
            meetings=to_choices(visible, session.email),
            auto_redirect=True,
            user_alias=user_alias,
            session=session,
            new_refresh_token=new_refresh_token
        )

    async def resolve_new(self, session: Optional[UserSession]) -> Resolution:
        """
        Create a fresh meeting that bypasses the cache.

        Raises:
            SignInRequiredError: If there is no session and no fallback token
            RotatedTokenError: If creation failed after the session's token rotated
        """
        if session is not None:
            try:
                result = await self.provisioner.create_uncached(
                    session.email, session.name, session.refresh_token
                )
            except RotatedTokenError as e:
                e.session = session.with_refresh_token(e.new_refresh_token)
                raise
            if result.new_refresh_token:
                session = session.with_refresh_token(result.new_refresh_token)
            return Resolution(
                redirect_url=result.entry.url,
                session=session,
                new_refresh_token=result.new_refresh_token
            )

        refresh_token = await self.fallback_token()
        if not refresh_token:
            raise SignInRequiredError("Sign in to create a meeting.")
        result = await self.provisioner.create_uncached(
            DEFAULT_USER_KEY, DEFAULT_USER_NAME, refresh_token
        )
        return Resolution(redirect_url=result.entry.url)
