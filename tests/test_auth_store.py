"""Tests for the auth state store."""

import json

import pytest
import respx
from httpx import Response

from agape.auth.store import AuthStore
from agape.backend.client import BackendClient
from agape.backend.errors import AuthError

BASE_URL = "https://test.supabase.co"
PROFILES_URL = f"{BASE_URL}/rest/v1/profiles"

TOKEN_PAYLOAD = {
    "access_token": "access",
    "refresh_token": "refresh",
    "expires_in": 3600,
    "user": {"id": "user-1", "email": "ada@example.com"},
}
PROFILE_ROW = {"id": "user-1", "display_name": "Ada", "role": "supporter", "points_earned": 7}


@pytest.mark.asyncio
async def test_initialize_signed_out(client):
    store = AuthStore(client)
    snapshots = []
    store.subscribe(lambda s: snapshots.append((s.loading, s.initialized)))

    await store.initialize()

    assert store.user is None
    assert store.loading is False
    assert store.initialized is True
    assert snapshots[-1] == (False, True)


@pytest.mark.asyncio
@respx.mock
async def test_initialize_with_session(signed_in_client):
    respx.get(PROFILES_URL).mock(return_value=Response(200, json=[PROFILE_ROW]))
    store = AuthStore(signed_in_client)

    await store.initialize()

    assert store.user.id == "user-1"
    assert store.user.profile.points_earned == 7
    assert store.session is not None


@pytest.mark.asyncio
@respx.mock
async def test_sign_in_loads_profile(client):
    respx.post(f"{BASE_URL}/auth/v1/token").mock(return_value=Response(200, json=TOKEN_PAYLOAD))
    respx.get(PROFILES_URL).mock(return_value=Response(200, json=[PROFILE_ROW]))
    store = AuthStore(client)

    user = await store.sign_in("ada@example.com", "secret123")

    assert user.profile.display_name == "Ada"
    assert store.user == user
    assert store.session.access_token == "access"
    assert store.loading is False


@pytest.mark.asyncio
@respx.mock
async def test_sign_in_failure_raises(client):
    respx.post(f"{BASE_URL}/auth/v1/token").mock(
        return_value=Response(400, json={"error_description": "Invalid login credentials"})
    )
    store = AuthStore(client)

    with pytest.raises(AuthError, match="Invalid login credentials"):
        await store.sign_in("ada@example.com", "wrong")

    assert store.user is None
    assert store.loading is False


@pytest.mark.asyncio
@respx.mock
async def test_sign_up_creates_profile(client):
    respx.post(f"{BASE_URL}/auth/v1/signup").mock(
        return_value=Response(200, json={"id": "user-2", "email": "bo@example.com"})
    )
    insert = respx.post(PROFILES_URL).mock(return_value=Response(201))
    respx.get(PROFILES_URL).mock(return_value=Response(200, json=[{"id": "user-2", "display_name": "Bo"}]))
    store = AuthStore(client)

    user = await store.sign_up("bo@example.com", "Str0ng!Pass", "Bo")

    assert user.id == "user-2"
    assert store.session is None
    assert json.loads(insert.calls.last.request.content) == {
        "id": "user-2",
        "display_name": "Bo",
        "role": "supporter",
        "points_earned": 0,
        "current_streak": 0,
        "level": 1,
        "total_donations": 0,
    }


@pytest.mark.asyncio
@respx.mock
async def test_sign_up_profile_already_exists(client):
    """Test that a profile row created by a trigger does not fail sign-up."""
    respx.post(f"{BASE_URL}/auth/v1/signup").mock(
        return_value=Response(200, json={"id": "user-2", "email": "bo@example.com"})
    )
    respx.post(PROFILES_URL).mock(return_value=Response(409, json={"code": "23505", "message": "duplicate"}))
    respx.get(PROFILES_URL).mock(return_value=Response(200, json=[{"id": "user-2", "display_name": "Bo"}]))
    store = AuthStore(client)

    user = await store.sign_up("bo@example.com", "Str0ng!Pass", "Bo")

    assert user.profile.display_name == "Bo"


@pytest.mark.asyncio
@respx.mock
async def test_sign_out_clears_state(signed_in_client):
    respx.post(f"{BASE_URL}/auth/v1/logout").mock(return_value=Response(204))
    respx.get(PROFILES_URL).mock(return_value=Response(200, json=[PROFILE_ROW]))
    store = AuthStore(signed_in_client)
    await store.initialize()

    await store.sign_out()

    assert store.user is None
    assert store.session is None
    assert store.loading is False


@pytest.mark.asyncio
@respx.mock
async def test_refresh_profile(signed_in_client):
    respx.get(PROFILES_URL).mock(
        side_effect=[
            Response(200, json=[PROFILE_ROW]),
            Response(200, json=[{**PROFILE_ROW, "points_earned": 9}]),
        ]
    )
    store = AuthStore(signed_in_client)
    await store.initialize()

    await store.refresh_profile()

    assert store.user.profile.points_earned == 9


@pytest.mark.asyncio
async def test_unsubscribe_listener(client):
    store = AuthStore(client)
    calls = []
    unsubscribe = store.subscribe(lambda s: calls.append(s))
    unsubscribe()

    await store.initialize()

    assert calls == []


@pytest.mark.asyncio
@respx.mock
async def test_resend_verification_email():
    route = respx.post(f"{BASE_URL}/auth/v1/resend").mock(return_value=Response(200, json={}))

    async with BackendClient(BASE_URL, "anon") as client:
        await AuthStore(client).resend_verification_email("ada@example.com")

    assert route.called


@pytest.mark.asyncio
@respx.mock
async def test_initialize_profile_with_null_columns(signed_in_client):
    respx.get(PROFILES_URL).mock(
        return_value=Response(
            200,
            json=[{"id": "user-1", "display_name": None, "role": None, "level": None, "points_earned": None}],
        )
    )
    store = AuthStore(signed_in_client)

    await store.initialize()

    profile = store.user.profile
    assert profile.points_earned == 0
    assert profile.level == 1
    assert profile.role == "supporter"
    assert store.initialized is True


@pytest.mark.asyncio
@respx.mock
async def test_sign_in_profile_with_null_points(client):
    respx.post(f"{BASE_URL}/auth/v1/token").mock(return_value=Response(200, json=TOKEN_PAYLOAD))
    respx.get(PROFILES_URL).mock(return_value=Response(200, json=[{"id": "user-1", "points_earned": None}]))
    store = AuthStore(client)

    user = await store.sign_in("ada@example.com", "secret123")

    assert user.profile.points_earned == 0
    assert store.loading is False


@pytest.mark.asyncio
@respx.mock
async def test_malformed_profile_row_is_skipped(client):
    """Test that a profile row without an id leaves the user without a profile."""
    respx.post(f"{BASE_URL}/auth/v1/token").mock(return_value=Response(200, json=TOKEN_PAYLOAD))
    respx.get(PROFILES_URL).mock(return_value=Response(200, json=[{"display_name": "Ada"}]))
    store = AuthStore(client)

    user = await store.sign_in("ada@example.com", "secret123")

    assert user.id == "user-1"
    assert user.profile is None
