"""Tests for the backend client and its error mapping."""

import httpx
import pytest
import respx
from httpx import Response

from agape.backend.client import BackendClient
from agape.backend.errors import (
    AuthError,
    BackendError,
    NotAuthenticatedError,
    NotFoundError,
    UniqueViolationError,
)
from agape.config.loader import ConfigError
from agape.config.schema import AgapeConfig
from agape.storage import LocalStorage

BASE_URL = "https://test.supabase.co"


def _error_response(status: int, payload: dict, path: str = "/rest/v1/t") -> Response:
    return Response(status, json=payload, request=httpx.Request("GET", f"{BASE_URL}{path}"))


def test_from_response_postgrest_payload():
    error = BackendError.from_response(
        _error_response(
            400,
            {"code": "22P02", "message": "invalid input syntax", "details": "x", "hint": "y"},
        )
    )

    assert type(error) is BackendError
    assert error.code == "22P02"
    assert error.status == 400
    assert error.message == "invalid input syntax"
    assert error.details == "x"
    assert error.hint == "y"


def test_from_response_specific_codes():
    not_found = BackendError.from_response(_error_response(406, {"code": "PGRST116", "message": "no rows"}))
    duplicate = BackendError.from_response(
        _error_response(409, {"code": "23505", "message": "duplicate key value"})
    )

    assert isinstance(not_found, NotFoundError)
    assert isinstance(duplicate, UniqueViolationError)


def test_from_response_auth_payload():
    """Test that auth API errors become AuthError with their description."""
    error = BackendError.from_response(
        _error_response(
            400,
            {"error": "invalid_grant", "error_description": "Invalid login credentials"},
            path="/auth/v1/token",
        )
    )

    assert isinstance(error, AuthError)
    assert error.message == "Invalid login credentials"


def test_from_response_without_json_or_request():
    error = BackendError.from_response(Response(502, text="<html>bad gateway</html>"))

    assert type(error) is BackendError
    assert error.status == 502
    assert error.message == "Bad Gateway"


def test_with_context_keeps_type():
    original = UniqueViolationError("duplicate key", code="23505", status=409)
    wrapped = original.with_context("Failed to add family")

    assert isinstance(wrapped, UniqueViolationError)
    assert wrapped.message == "Failed to add family: duplicate key"
    assert str(wrapped) == "Failed to add family: duplicate key"
    assert wrapped.code == "23505"
    assert original.message == "duplicate key"


def test_not_authenticated_defaults():
    error = NotAuthenticatedError()

    assert isinstance(error, AuthError)
    assert error.message == "User not authenticated"
    assert error.status == 401


def test_from_config_requires_credentials(monkeypatch):
    monkeypatch.delenv("AGAPE_SUPABASE_URL", raising=False)
    monkeypatch.delenv("AGAPE_SUPABASE_ANON_KEY", raising=False)

    with pytest.raises(ConfigError):
        BackendClient.from_config(AgapeConfig())


def test_from_config_uses_storage_path(monkeypatch, tmp_path):
    monkeypatch.setenv("AGAPE_SUPABASE_URL", "https://env.supabase.co/")
    monkeypatch.setenv("AGAPE_SUPABASE_ANON_KEY", "env-key")
    config = AgapeConfig()
    config.storage.path = str(tmp_path / "storage.db")

    client = BackendClient.from_config(config)

    assert client.url == "https://env.supabase.co"
    assert client.anon_key == "env-key"
    assert isinstance(client.auth._storage, LocalStorage)


@pytest.mark.asyncio
@respx.mock
async def test_request_raises_backend_error(client):
    respx.get(f"{BASE_URL}/rest/v1/t").mock(
        return_value=Response(500, json={"message": "boom", "code": "XX000"})
    )

    with pytest.raises(BackendError, match="boom") as exc_info:
        await client.request("GET", "/rest/v1/t")

    assert exc_info.value.status == 500


@pytest.mark.asyncio
@respx.mock
async def test_request_wraps_transport_errors(client):
    respx.get(f"{BASE_URL}/rest/v1/t").mock(side_effect=httpx.ConnectError("refused"))

    with pytest.raises(BackendError, match="Request to /rest/v1/t failed"):
        await client.request("GET", "/rest/v1/t")


@pytest.mark.asyncio
@respx.mock
async def test_request_uses_session_token(signed_in_client):
    """Test that a signed-in client sends the user's access token."""
    route = respx.get(f"{BASE_URL}/rest/v1/t").mock(return_value=Response(200, json=[]))

    await signed_in_client.request("GET", "/rest/v1/t")

    request = route.calls.last.request
    assert request.headers["authorization"] == "Bearer access-user-1"
    assert request.headers["apikey"] == "test-anon-key"


@pytest.mark.asyncio
@respx.mock
async def test_rpc(client):
    route = respx.post(f"{BASE_URL}/rest/v1/rpc/refresh_engagement_counts").mock(
        return_value=Response(204)
    )

    result = await client.rpc("refresh_engagement_counts")

    assert result.data is None
    assert route.called


@pytest.mark.asyncio
@respx.mock
async def test_health_check():
    respx.get(f"{BASE_URL}/auth/v1/health").mock(return_value=Response(200, json={"version": "v2"}))

    async with BackendClient(BASE_URL, "k") as client:
        assert await client.health_check() is True


@pytest.mark.asyncio
@respx.mock
async def test_health_check_unreachable():
    respx.get(f"{BASE_URL}/auth/v1/health").mock(side_effect=httpx.ConnectError("refused"))

    async with BackendClient(BASE_URL, "k") as client:
        assert await client.health_check() is False
