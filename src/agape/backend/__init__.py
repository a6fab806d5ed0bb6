"""Client for the hosted data and auth APIs."""

from .auth import AuthClient, AuthResponse, Session, User
from .client import BackendClient
from .errors import (
    AuthError,
    BackendError,
    NotAuthenticatedError,
    NotFoundError,
    UniqueViolationError,
)
from .query import QueryResult, TableQuery

__all__ = [
    "AuthClient",
    "AuthError",
    "AuthResponse",
    "BackendClient",
    "BackendError",
    "NotAuthenticatedError",
    "NotFoundError",
    "QueryResult",
    "Session",
    "TableQuery",
    "UniqueViolationError",
    "User",
]
