"""
FastAPI dependencies.

Every component receives its secrets and store handles explicitly; these
functions are the one place where they are assembled from Settings.
"""

from typing import Optional

from fastapi import Depends, Request

from meetlink.adapters.kv import KeyValueStore
from meetlink.adapters.kv.factory import KeyValueStoreFactory
from meetlink.constants import COOKIE_NAME
from meetlink.repositories.aliases import AliasIndex
from meetlink.repositories.meetings import MeetingCache
from meetlink.repositories.tokens import TokenStore
from meetlink.schemas.session import UserSession
from meetlink.services.google_oauth import GoogleOAuthClient
from meetlink.services.meet_api import MeetApiClient
from meetlink.services.provisioner import MeetingProvisioner
from meetlink.services.resolver import MeetingResolver
from meetlink.services.visibility import VisibilityPolicy
from meetlink.utils.config import Settings, get_settings
from meetlink.utils.cookies import decode_session


async def get_store(settings: Settings = Depends(get_settings)) -> KeyValueStore:
    return await KeyValueStoreFactory.get_store(settings)


def get_meeting_cache(
    store: KeyValueStore = Depends(get_store),
    settings: Settings = Depends(get_settings)
) -> MeetingCache:
    return MeetingCache(store, page_size=settings.KV_PAGE_SIZE)


def get_token_store(store: KeyValueStore = Depends(get_store)) -> TokenStore:
    return TokenStore(store)


def get_alias_index(store: KeyValueStore = Depends(get_store)) -> AliasIndex:
    return AliasIndex(store)


def get_oauth_client(settings: Settings = Depends(get_settings)) -> GoogleOAuthClient:
    return GoogleOAuthClient(
        settings.GOOGLE_CLIENT_ID,
        settings.GOOGLE_CLIENT_SECRET,
        timeout=settings.HTTP_TIMEOUT
    )


def get_meet_api(settings: Settings = Depends(get_settings)) -> MeetApiClient:
    return MeetApiClient(timeout=settings.HTTP_TIMEOUT)


def get_provisioner(
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
    meet_api: MeetApiClient = Depends(get_meet_api),
    meetings: MeetingCache = Depends(get_meeting_cache),
    tokens: TokenStore = Depends(get_token_store)
) -> MeetingProvisioner:
    return MeetingProvisioner(oauth, meet_api, meetings, tokens)


def get_resolver(
    meetings: MeetingCache = Depends(get_meeting_cache),
    tokens: TokenStore = Depends(get_token_store),
    aliases: AliasIndex = Depends(get_alias_index),
    provisioner: MeetingProvisioner = Depends(get_provisioner),
    settings: Settings = Depends(get_settings)
) -> MeetingResolver:
    return MeetingResolver(
        meetings,
        tokens,
        aliases,
        provisioner,
        VisibilityPolicy(settings.public_domains),
        fallback_refresh_token=settings.GOOGLE_REFRESH_TOKEN
    )


def get_current_session(request: Request, settings: Settings = Depends(get_settings)) -> Optional[UserSession]:
    """Session from the signed cookie, or None if signed out or tampered with."""
    return decode_session(request.cookies.get(COOKIE_NAME), settings.COOKIE_SECRET)
