"""Exceptions raised by the backend client."""

import copy
from typing import Any

import httpx

# PostgREST: single-object request matched zero (or many) rows
NOT_FOUND_CODE = "PGRST116"
# Postgres: unique_violation
UNIQUE_VIOLATION_CODE = "23505"


class BackendError(Exception):
    """A failed request against the data or auth API."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status: int | None = None,
        details: Any = None,
        hint: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.details = details
        self.hint = hint

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, code={self.code!r}, status={self.status!r})"

    def with_context(self, prefix: str) -> "BackendError":
        """Copy of this error with its message prefixed, keeping type and code."""
        error = copy.copy(self)
        error.message = f"{prefix}: {self.message}"
        error.args = (error.message,)
        return error

    @classmethod
    def from_response(cls, response: httpx.Response) -> "BackendError":
        """Build the most specific error for an error response.

        Understands both PostgREST payloads (``code``/``message``/``details``/``hint``)
        and auth API payloads (``error``/``error_description``/``msg``/``error_code``).
        """
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        try:
            is_auth = "/auth/v1/" in response.request.url.path
        except RuntimeError:
            # Response built without a request (tests, replays)
            is_auth = False
        code = payload.get("code") or payload.get("error_code")
        if code is not None:
            code = str(code)
        message = (
            payload.get("message")
            or payload.get("msg")
            or payload.get("error_description")
            or payload.get("error")
            or response.reason_phrase
            or f"HTTP {response.status_code}"
        )

        if code == NOT_FOUND_CODE:
            error_cls: type[BackendError] = NotFoundError
        elif code == UNIQUE_VIOLATION_CODE:
            error_cls = UniqueViolationError
        elif is_auth:
            error_cls = AuthError
        else:
            error_cls = BackendError

        return error_cls(
            str(message),
            code=code,
            status=response.status_code,
            details=payload.get("details"),
            hint=payload.get("hint"),
        )


class NotFoundError(BackendError):
    """A single-row lookup matched no rows."""


class UniqueViolationError(BackendError):
    """An insert collided with a unique constraint."""


class AuthError(BackendError):
    """The auth API rejected a request."""


class NotAuthenticatedError(AuthError):
    """An operation needs a signed-in user and there is none."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message, status=401)
