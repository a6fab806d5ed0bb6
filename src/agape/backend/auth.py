"""Auth API (GoTrue) client with optional session persistence."""

import inspect
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, ValidationError

from agape.backend.errors import AuthError, BackendError
from agape.storage import LocalStorage

if TYPE_CHECKING:
    from agape.backend.client import BackendClient

logger = logging.getLogger(__name__)

SESSION_STORAGE_KEY = "auth_session"

# Auth state change events
INITIAL_SESSION = "INITIAL_SESSION"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"
USER_UPDATED = "USER_UPDATED"
PASSWORD_RECOVERY = "PASSWORD_RECOVERY"

AuthListener = Callable[[str, "Session | None"], Awaitable[None] | None]


class User(BaseModel):
    """An authenticated account."""

    id: str
    email: str | None = None
    email_confirmed_at: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)


class Session(BaseModel):
    """Tokens for a signed-in user."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    expires_at: int | None = None
    user: User

    def is_expired(self, now: float | None = None, margin: int = 10) -> bool:
        if self.expires_at is None:
            return False
        current = time.time() if now is None else now
        return self.expires_at - margin <= current


@dataclass
class AuthResponse:
    """User and (when issued) session returned by sign-in/sign-up."""

    user: User | None
    session: Session | None


def _parse_session(payload: dict[str, Any]) -> Session:
    if payload.get("expires_at") is None and payload.get("expires_in"):
        payload = {**payload, "expires_at": int(time.time()) + int(payload["expires_in"])}
    return Session.model_validate(payload)


class AuthClient:
    """Client for the ``/auth/v1`` endpoints."""

    def __init__(self, client: "BackendClient", storage: LocalStorage | None = None):
        """
        Initialize auth client.

        Args:
            client: Owning backend client (used for transport)
            storage: Optional storage used to persist the session between runs
        """
        self._client = client
        self._storage = storage
        self._session: Session | None = None
        self._listeners: list[AuthListener] = []
        self._restored = False

    @property
    def session(self) -> Session | None:
        """Current in-memory session (no network access)."""
        return self._session

    @property
    def access_token(self) -> str | None:
        return self._session.access_token if self._session else None

    # -- Listeners -------------------------------------------------------------

    def on_auth_state_change(self, callback: AuthListener) -> Callable[[], None]:
        """Register a listener for auth events.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _emit(self, event: str) -> None:
        logger.info(f"Auth event: {event}")
        for listener in list(self._listeners):
            result = listener(event, self._session)
            if inspect.isawaitable(result):
                await result

    # -- Session persistence --------------------------------------------------

    def _persist(self) -> None:
        if self._storage is None:
            return
        if self._session is None:
            self._storage.remove_item(SESSION_STORAGE_KEY)
        else:
            self._storage.set_item(SESSION_STORAGE_KEY, self._session.model_dump_json())

    def _restore(self) -> None:
        if self._restored or self._storage is None:
            return
        self._restored = True
        raw = self._storage.get_item(SESSION_STORAGE_KEY)
        if not raw:
            return
        try:
            self._session = Session.model_validate_json(raw)
        except (ValidationError, json.JSONDecodeError) as e:
            logger.warning(f"Discarding unreadable stored session: {e}")
            self._storage.remove_item(SESSION_STORAGE_KEY)

    async def _set_session(self, session: Session | None, event: str) -> None:
        self._session = session
        self._persist()
        await self._emit(event)

    # -- Endpoints --------------------------------------------------------------

    async def sign_in_with_password(self, email: str, password: str) -> AuthResponse:
        """Sign in with email and password.

        Raises:
            AuthError: If the credentials are rejected
        """
        response = await self._client.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = _parse_session(response.json())
        await self._set_session(session, SIGNED_IN)
        return AuthResponse(user=session.user, session=session)

    async def sign_up(
        self, email: str, password: str, data: dict[str, Any] | None = None
    ) -> AuthResponse:
        """Create an account.

        When email confirmation is enabled the API returns only the user and
        no session is started.
        """
        response = await self._client.request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password, "data": data or {}},
        )
        payload = response.json()

        if payload.get("access_token"):
            session = _parse_session(payload)
            await self._set_session(session, SIGNED_IN)
            return AuthResponse(user=session.user, session=session)

        user_payload = payload.get("user", payload)
        user = User.model_validate(user_payload) if user_payload.get("id") else None
        return AuthResponse(user=user, session=None)

    async def sign_out(self) -> None:
        """End the session locally and (best effort) on the server."""
        if self._session is not None:
            try:
                await self._client.request("POST", "/auth/v1/logout")
            except BackendError as e:
                # Token already invalid server-side; local sign-out still applies
                logger.warning(f"Server sign-out failed: {e}")
        await self._set_session(None, SIGNED_OUT)

    async def refresh_session(self) -> Session | None:
        """Exchange the refresh token for a new session."""
        if self._session is None or not self._session.refresh_token:
            return None
        response = await self._client.request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": self._session.refresh_token},
        )
        session = _parse_session(response.json())
        await self._set_session(session, TOKEN_REFRESHED)
        return session

    async def get_session(self) -> Session | None:
        """Current session, restored from storage and refreshed if expired."""
        self._restore()
        if self._session is not None and self._session.is_expired():
            try:
                return await self.refresh_session()
            except AuthError as e:
                logger.warning(f"Session refresh failed, signing out: {e}")
                await self._set_session(None, SIGNED_OUT)
                return None
        return self._session

    async def get_user(self) -> User | None:
        """Fetch the signed-in user from the server, or None when signed out."""
        session = await self.get_session()
        if session is None:
            return None
        response = await self._client.request("GET", "/auth/v1/user")
        return User.model_validate(response.json())

    async def reset_password_for_email(self, email: str, redirect_to: str | None = None) -> None:
        """Send a password reset email."""
        params = {"redirect_to": redirect_to} if redirect_to else None
        await self._client.request(
            "POST", "/auth/v1/recover", params=params, json={"email": email}
        )

    async def update_user(self, password: str | None = None, data: dict[str, Any] | None = None) -> User:
        """Update the signed-in user's password and/or metadata."""
        body: dict[str, Any] = {}
        if password is not None:
            body["password"] = password
        if data is not None:
            body["data"] = data
        response = await self._client.request("PUT", "/auth/v1/user", json=body)
        user = User.model_validate(response.json())
        if self._session is not None:
            self._session = self._session.model_copy(update={"user": user})
            self._persist()
        await self._emit(USER_UPDATED)
        return user

    async def resend_signup(self, email: str) -> None:
        """Resend the signup confirmation email."""
        await self._client.request(
            "POST", "/auth/v1/resend", json={"type": "signup", "email": email}
        )
