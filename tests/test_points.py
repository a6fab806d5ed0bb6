"""Tests for the points service."""

import json

import pytest
import respx
from httpx import Response

from agape.auth.store import AuthStore
from agape.config.schema import PointsConfig
from agape.models import AuthUser, Profile
from agape.services.points import PointsService

PROFILES_URL = "https://test.supabase.co/rest/v1/profiles"


def _store_with_points(client, points: int) -> AuthStore:
    store = AuthStore(client)
    store.user = AuthUser(
        id="user-1",
        email="ada@example.com",
        profile=Profile(id="user-1", display_name="Ada", points_earned=points),
    )
    return store


@pytest.mark.asyncio
async def test_award_points_signed_out(client):
    service = PointsService(client, AuthStore(client))

    assert await service.award_points(5) is False


@pytest.mark.asyncio
@respx.mock
async def test_award_points_updates_and_refreshes(signed_in_client):
    """Test that points are added to the cached total and the profile reloaded."""
    update = respx.patch(PROFILES_URL).mock(return_value=Response(200, json=[]))
    respx.get(PROFILES_URL).mock(
        return_value=Response(200, json=[{"id": "user-1", "display_name": "Ada", "points_earned": 12}])
    )
    store = _store_with_points(signed_in_client, 10)

    assert await PointsService(signed_in_client, store).award_share_points() is True

    request = update.calls.last.request
    assert json.loads(request.content) == {"points_earned": 12}
    assert request.url.params["id"] == "eq.user-1"
    assert store.user.profile.points_earned == 12


@pytest.mark.asyncio
@respx.mock
async def test_deduct_like_points(signed_in_client):
    update = respx.patch(PROFILES_URL).mock(return_value=Response(200, json=[]))
    respx.get(PROFILES_URL).mock(return_value=Response(200, json=[{"id": "user-1", "points_earned": 2}]))
    store = _store_with_points(signed_in_client, 3)

    assert await PointsService(signed_in_client, store, PointsConfig(like=1)).deduct_like_points() is True

    assert json.loads(update.calls.last.request.content) == {"points_earned": 2}


@pytest.mark.asyncio
@respx.mock
async def test_award_points_without_profile_starts_at_zero(signed_in_client):
    update = respx.patch(PROFILES_URL).mock(return_value=Response(200, json=[]))
    respx.get(PROFILES_URL).mock(return_value=Response(200, json=[]))
    store = AuthStore(signed_in_client)
    store.user = AuthUser(id="user-1", email="ada@example.com")

    assert await PointsService(signed_in_client, store).award_like_points() is True

    assert json.loads(update.calls.last.request.content) == {"points_earned": 1}


@pytest.mark.asyncio
@respx.mock
async def test_award_points_failure(signed_in_client):
    respx.patch(PROFILES_URL).mock(return_value=Response(500, json={"message": "boom"}))
    store = _store_with_points(signed_in_client, 10)

    assert await PointsService(signed_in_client, store).award_points(1) is False
    assert store.user.profile.points_earned == 10
