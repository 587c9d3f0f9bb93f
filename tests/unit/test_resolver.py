"""
Unit tests for the request resolver.

The resolver runs against the in-memory store and the fake Google endpoints,
so every branch exercises the real provisioner, cache and alias index.
"""

from urllib.parse import parse_qsl

import pytest

from meetlink.exceptions import (
    InvalidAliasError,
    RotatedTokenError,
    SignInRequiredError,
    TokenRefreshError,
    UserNotFoundError,
)
from meetlink.schemas.meeting import MeetingChoice, MeetingEntry
from meetlink.schemas.session import UserSession
from meetlink.services.resolver import MeetingResolver, Resolution, to_choices


def entry(email: str, n: int = 1) -> MeetingEntry:
    return MeetingEntry(url=f"https://meet.google.com/cached-{n:03d}", name=email.split("@")[0], email=email)


@pytest.fixture
def alice() -> UserSession:
    return UserSession(refresh_token="rt_alice", email="alice@acme.com", name="Alice")


@pytest.fixture
def fallback_resolver(meeting_cache, token_store, alias_index, provisioner, policy) -> MeetingResolver:
    return MeetingResolver(
        meeting_cache, token_store, alias_index, provisioner, policy,
        fallback_refresh_token="rt_default"
    )


def test_to_choices_strips_email():
    choices = to_choices([entry("alice@acme.com", 1), entry("bob@acme.com", 2)], "alice@acme.com")

    assert choices == [
        MeetingChoice(url="https://meet.google.com/cached-001", name="alice", is_current_user=True),
        MeetingChoice(url="https://meet.google.com/cached-002", name="bob", is_current_user=False),
    ]
    assert "email" not in choices[0].model_dump()


def test_auto_redirect_url():
    meetings = to_choices([entry("alice@acme.com", 1), entry("bob@acme.com", 2)], "bob@acme.com")

    assert Resolution(meetings=meetings, auto_redirect=True).auto_redirect_url == "https://meet.google.com/cached-002"
    assert Resolution(meetings=meetings).auto_redirect_url is None


# Signed out

@pytest.mark.asyncio
async def test_signed_out_single_public_meeting_redirects(resolver, meeting_cache, fake_google):
    await meeting_cache.store("dave@gmail.com", entry("dave@gmail.com", 1))
    await meeting_cache.store("bob@acme.com", entry("bob@acme.com", 2))

    resolution = await resolver.resolve(None)

    assert resolution.redirect_url == "https://meet.google.com/cached-001"
    assert fake_google.requests == []


@pytest.mark.asyncio
async def test_signed_out_several_public_meetings(resolver, meeting_cache):
    await meeting_cache.store("dave@gmail.com", entry("dave@gmail.com", 1))
    await meeting_cache.store("erin@gmail.com", entry("erin@gmail.com", 2))

    resolution = await resolver.resolve(None)

    assert not resolution.is_redirect
    assert len(resolution.meetings) == 2
    assert not any(m.is_current_user for m in resolution.meetings)
    assert resolution.auto_redirect_url is None


@pytest.mark.asyncio
async def test_signed_out_empty_without_fallback(resolver, fake_google):
    resolution = await resolver.resolve(None)

    assert not resolution.is_redirect
    assert resolution.meetings == []
    assert fake_google.requests == []


@pytest.mark.asyncio
async def test_signed_out_empty_with_fallback_provisions_default(fallback_resolver, meeting_cache):
    resolution = await fallback_resolver.resolve(None)

    assert resolution.redirect_url == "https://meet.google.com/abc-defg-001"
    cached = await meeting_cache.get("__default__")
    assert cached.name == "Default"
    assert cached.url == resolution.redirect_url


# Signed in

@pytest.mark.asyncio
async def test_signed_in_first_visit_creates_meeting(resolver, meeting_cache, alias_index, alice):
    resolution = await resolver.resolve(alice)

    assert resolution.redirect_url == "https://meet.google.com/abc-defg-001"
    assert (await meeting_cache.get("alice@acme.com")).url == resolution.redirect_url
    assert await alias_index.resolve(await alias_index.get_or_create("alice@acme.com")) == "alice@acme.com"
    assert resolution.new_refresh_token is None


@pytest.mark.asyncio
async def test_signed_in_existing_meeting_is_reused(resolver, meeting_cache, fake_google, alice):
    await meeting_cache.store("alice@acme.com", entry("alice@acme.com", 7))

    resolution = await resolver.resolve(alice)

    assert resolution.redirect_url == "https://meet.google.com/cached-007"
    assert fake_google.requests == []


@pytest.mark.asyncio
async def test_signed_in_several_meetings_selection(resolver, meeting_cache, alias_index, alice):
    await meeting_cache.store("alice@acme.com", entry("alice@acme.com", 1))
    await meeting_cache.store("bob@acme.com", entry("bob@acme.com", 2))
    await meeting_cache.store("dave@gmail.com", entry("dave@gmail.com", 3))

    resolution = await resolver.resolve(alice)

    assert not resolution.is_redirect
    assert resolution.auto_redirect is True
    assert sorted(m.url for m in resolution.meetings) == [
        "https://meet.google.com/cached-001",
        "https://meet.google.com/cached-002",
    ]
    current = [m for m in resolution.meetings if m.is_current_user]
    assert [m.url for m in current] == ["https://meet.google.com/cached-001"]
    assert resolution.auto_redirect_url == "https://meet.google.com/cached-001"
    assert resolution.user_alias == await alias_index.get_or_create("alice@acme.com")


@pytest.mark.asyncio
async def test_signed_in_show_public_hides_own_org_meeting(resolver, meeting_cache, alice):
    await meeting_cache.store("alice@acme.com", entry("alice@acme.com", 1))
    await meeting_cache.store("dave@gmail.com", entry("dave@gmail.com", 2))
    await meeting_cache.store("erin@gmail.com", entry("erin@gmail.com", 3))

    resolution = await resolver.resolve(alice, show_public=True)

    assert sorted(m.url for m in resolution.meetings) == [
        "https://meet.google.com/cached-002",
        "https://meet.google.com/cached-003",
    ]
    assert resolution.auto_redirect_url is None


@pytest.mark.asyncio
async def test_signed_in_rotation_updates_session(resolver, token_store, fake_google, alice):
    fake_google.rotate_to = "rt_alice_2"

    resolution = await resolver.resolve(alice)

    assert resolution.new_refresh_token == "rt_alice_2"
    assert resolution.session.refresh_token == "rt_alice_2"
    assert resolution.session.email == "alice@acme.com"
    assert (await token_store.get("alice@acme.com")).refresh_token == "rt_alice_2"


@pytest.mark.asyncio
async def test_signed_in_refresh_failure_propagates(resolver, fake_google, alice):
    fake_google.refresh_status = 400

    with pytest.raises(TokenRefreshError):
        await resolver.resolve(alice)


# Direct links

@pytest.mark.asyncio
async def test_direct_link_unknown_alias(resolver, fake_google):
    with pytest.raises(InvalidAliasError):
        await resolver.resolve(None, owner_alias="deadbeef")

    assert fake_google.requests == []


@pytest.mark.asyncio
async def test_direct_link_owner_without_token(resolver, alias_index, fake_google):
    alias = await alias_index.get_or_create("bob@acme.com")

    with pytest.raises(UserNotFoundError):
        await resolver.resolve(None, owner_alias=alias)

    assert fake_google.requests == []


@pytest.mark.asyncio
async def test_direct_link_uses_cached_meeting(resolver, alias_index, token_store, meeting_cache, fake_google):
    alias = await alias_index.get_or_create("bob@acme.com")
    await token_store.store("bob@acme.com", "rt_bob", "Bob")
    await meeting_cache.store("bob@acme.com", entry("bob@acme.com", 4))

    resolution = await resolver.resolve(None, owner_alias=alias)

    assert resolution.redirect_url == "https://meet.google.com/cached-004"
    assert fake_google.requests == []


@pytest.mark.asyncio
async def test_direct_link_provisions_with_owner_token(resolver, alias_index, token_store, meeting_cache, fake_google, alice):
    """The owner's token is spent, never the visitor's."""
    alias = await alias_index.get_or_create("bob@acme.com")
    await token_store.store("bob@acme.com", "rt_bob", "Bob")
    fake_google.rotate_to = "rt_bob_2"

    resolution = await resolver.resolve(alice, owner_alias=alias)

    assert resolution.redirect_url == "https://meet.google.com/abc-defg-001"
    assert resolution.new_refresh_token is None
    assert resolution.session == alice
    assert (await meeting_cache.get("bob@acme.com")).name == "Bob"
    assert (await token_store.get("bob@acme.com")).refresh_token == "rt_bob_2"
    (meet_request,) = fake_google.calls("meet")
    assert meet_request.headers["authorization"] == "Bearer access_for_rt_bob"


@pytest.mark.asyncio
async def test_direct_link_ignores_visibility(resolver, alias_index, token_store, meeting_cache):
    alias = await alias_index.get_or_create("bob@acme.com")
    await token_store.store("bob@acme.com", "rt_bob", "Bob")
    await meeting_cache.store("bob@acme.com", entry("bob@acme.com", 4))

    resolution = await resolver.resolve(None, owner_alias=alias)

    assert resolution.redirect_url == "https://meet.google.com/cached-004"


# Fresh meetings

@pytest.mark.asyncio
async def test_resolve_new_signed_in(resolver, meeting_cache, alice):
    resolution = await resolver.resolve_new(alice)

    assert resolution.redirect_url == "https://meet.google.com/abc-defg-001"
    assert await meeting_cache.list() == []


@pytest.mark.asyncio
async def test_resolve_new_signed_out_without_fallback(resolver):
    with pytest.raises(SignInRequiredError):
        await resolver.resolve_new(None)


@pytest.mark.asyncio
async def test_resolve_new_signed_out_with_fallback(fallback_resolver, fake_google):
    resolution = await fallback_resolver.resolve_new(None)

    assert resolution.redirect_url == "https://meet.google.com/abc-defg-001"
    (meet_request,) = fake_google.calls("meet")
    assert meet_request.headers["authorization"] == "Bearer access_for_rt_default"


# Rotation reaching the caller

def refresh_tokens_sent(fake_google):
    return [dict(parse_qsl(r.content.decode()))["refresh_token"] for r in fake_google.calls("refresh")]


@pytest.mark.asyncio
async def test_own_direct_link_rotation_updates_session(resolver, alias_index, token_store, fake_google, alice):
    alias = await alias_index.get_or_create("alice@acme.com")
    await token_store.store("alice@acme.com", "rt_alice", "Alice")
    fake_google.rotate_to = "rt_alice_2"

    resolution = await resolver.resolve(alice, owner_alias=alias)

    assert resolution.is_redirect
    assert resolution.new_refresh_token == "rt_alice_2"
    assert resolution.session.refresh_token == "rt_alice_2"
    assert (await token_store.get("alice@acme.com")).refresh_token == "rt_alice_2"


@pytest.mark.asyncio
async def test_visitor_direct_link_failure_does_not_carry_owner_token(resolver, alias_index, token_store, fake_google, alice):
    alias = await alias_index.get_or_create("bob@acme.com")
    await token_store.store("bob@acme.com", "rt_bob", "Bob")
    fake_google.rotate_to = "rt_bob_2"
    fake_google.meet_status = 500

    with pytest.raises(RotatedTokenError) as exc_info:
        await resolver.resolve(alice, owner_alias=alias)

    assert exc_info.value.session is None
    assert (await token_store.get("bob@acme.com")).refresh_token == "rt_bob_2"


@pytest.mark.asyncio
async def test_signed_in_failure_after_rotation_carries_session(resolver, fake_google, alice):
    fake_google.rotate_to = "rt_alice_2"
    fake_google.meet_status = 500

    with pytest.raises(RotatedTokenError) as exc_info:
        await resolver.resolve(alice)

    assert exc_info.value.session.refresh_token == "rt_alice_2"
    assert exc_info.value.session.email == "alice@acme.com"


@pytest.mark.asyncio
async def test_resolve_new_failure_after_rotation_carries_session(resolver, fake_google, alice):
    fake_google.rotate_to = "rt_alice_2"
    fake_google.meet_status = 500

    with pytest.raises(RotatedTokenError) as exc_info:
        await resolver.resolve_new(alice)

    assert exc_info.value.session.refresh_token == "rt_alice_2"


@pytest.mark.asyncio
async def test_resolve_new_rotation_updates_session(resolver, fake_google, alice):
    fake_google.rotate_to = "rt_alice_2"

    resolution = await resolver.resolve_new(alice)

    assert resolution.new_refresh_token == "rt_alice_2"
    assert resolution.session.refresh_token == "rt_alice_2"
    assert refresh_tokens_sent(fake_google) == ["rt_alice"]


@pytest.mark.asyncio
async def test_fallback_uses_rotated_token_next_time(fallback_resolver, meeting_cache, token_store, fake_google):
    fake_google.rotate_to = "rt_default_2"
    await fallback_resolver.resolve(None)

    assert (await token_store.get("__default__")).refresh_token == "rt_default_2"

    await meeting_cache.clear_all()
    fake_google.rotate_to = None
    await fallback_resolver.resolve(None)
    await fallback_resolver.resolve_new(None)

    assert refresh_tokens_sent(fake_google) == ["rt_default", "rt_default_2", "rt_default_2"]


@pytest.mark.asyncio
async def test_fallback_token_without_configuration(resolver, token_store):
    await token_store.store("__default__", "rt_stale", "Default")

    assert await resolver.fallback_token() is None
