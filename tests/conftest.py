"""
Pytest configuration and fixtures for testing.

This module provides shared fixtures and configuration for all tests.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from meetlink.adapters.kv.memory import MemoryKeyValueStore
from meetlink.dependencies import get_meet_api, get_oauth_client, get_store
from meetlink.main import create_app
from meetlink.repositories.aliases import AliasIndex
from meetlink.repositories.meetings import MeetingCache
from meetlink.repositories.tokens import TokenStore
from meetlink.services.provisioner import MeetingProvisioner
from meetlink.services.resolver import MeetingResolver
from meetlink.services.visibility import VisibilityPolicy
from meetlink.utils.config import Settings, get_settings
from tests.fixtures.google_api import fake_google, meet_api, oauth_client  # noqa: F401
from tests.fixtures.sessions import TEST_COOKIE_SECRET


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        GOOGLE_CLIENT_ID="test_client_id",
        GOOGLE_CLIENT_SECRET="test_client_secret",
        GOOGLE_REFRESH_TOKEN=None,
        COOKIE_SECRET=TEST_COOKIE_SECRET,
        # TestClient talks plain http, secure cookies would never come back
        COOKIE_SECURE=False,
        KV_BACKEND="memory",
        PUBLIC_EMAIL_DOMAINS="gmail.com,googlemail.com",
    )


@pytest.fixture
def kv_store() -> MemoryKeyValueStore:
    """Small page size so every listing crosses page boundaries."""
    return MemoryKeyValueStore(page_size=2)


@pytest.fixture
def meeting_cache(kv_store) -> MeetingCache:
    return MeetingCache(kv_store)


@pytest.fixture
def token_store(kv_store) -> TokenStore:
    return TokenStore(kv_store)


@pytest.fixture
def alias_index(kv_store) -> AliasIndex:
    return AliasIndex(kv_store)


@pytest.fixture
def policy() -> VisibilityPolicy:
    return VisibilityPolicy(["gmail.com", "googlemail.com"])


@pytest.fixture
def provisioner(oauth_client, meet_api, meeting_cache, token_store) -> MeetingProvisioner:
    return MeetingProvisioner(oauth_client, meet_api, meeting_cache, token_store)


@pytest.fixture
def resolver(meeting_cache, token_store, alias_index, provisioner, policy) -> MeetingResolver:
    return MeetingResolver(meeting_cache, token_store, alias_index, provisioner, policy)


@pytest.fixture
def test_app(test_settings, kv_store, oauth_client, meet_api) -> FastAPI:
    """Application with the store and Google clients replaced by test doubles."""
    app = create_app()

    async def override_get_store():
        return kv_store

    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_store] = override_get_store
    app.dependency_overrides[get_oauth_client] = lambda: oauth_client
    app.dependency_overrides[get_meet_api] = lambda: meet_api
    return app


@pytest.fixture
def client(test_app) -> TestClient:
    """Test client that does not follow redirects to Google."""
    return TestClient(test_app, base_url="http://testserver", follow_redirects=False)
