"""Backend client for the hosted data (PostgREST) and auth APIs using httpx.

Talks to the REST endpoints directly with httpx instead of pulling in the
vendor SDK.
"""

import logging
from pathlib import Path
from typing import Any

import httpx

from agape.backend.auth import AuthClient
from agape.backend.errors import BackendError
from agape.backend.query import QueryResult, TableQuery
from agape.config.loader import resolve_credentials
from agape.config.schema import AgapeConfig
from agape.storage import LocalStorage

logger = logging.getLogger(__name__)


class BackendClient:
    """Entry point for table queries, RPC calls and auth."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: int = 30,
        storage: LocalStorage | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize backend client.

        Args:
            url: Project URL (e.g. "https://abc.supabase.co")
            anon_key: Public anon key
            timeout: Request timeout in seconds
            storage: Optional storage for persisting the auth session
            http_client: Optional preconfigured httpx client
        """
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self.auth = AuthClient(self, storage=storage)

    @classmethod
    def from_config(cls, config: AgapeConfig, storage: LocalStorage | None = None) -> "BackendClient":
        """Create a client from loaded configuration.

        Raises:
            ConfigError: If the backend URL or anon key is missing
        """
        url, anon_key = resolve_credentials(config)
        if storage is None and config.session.persist:
            storage = LocalStorage(Path(config.storage.path))
        return cls(url, anon_key, timeout=config.backend.timeout, storage=storage)

    def _headers(self) -> dict[str, str]:
        token = self.auth.access_token or self.anon_key
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token}",
        }

    async def request(
        self,
        method: str,
        path: str,
        params: Any = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request and raise on error responses.

        Raises:
            BackendError: For transport failures and error status codes
        """
        merged = self._headers()
        if headers:
            merged.update(headers)

        try:
            response = await self._client.request(
                method,
                f"{self.url}{path}",
                params=params,
                json=json,
                headers=merged,
            )
        except httpx.HTTPError as e:
            raise BackendError(f"Request to {path} failed: {e}") from e

        if response.is_error:
            error = BackendError.from_response(response)
            logger.debug(f"{method} {path} -> {response.status_code}: {error.message}")
            raise error

        return response

    def table(self, name: str) -> TableQuery:
        """Start a query against a table or view."""
        return TableQuery(self, name)

    async def rpc(self, function: str, params: dict[str, Any] | None = None) -> QueryResult:
        """Call a database function."""
        response = await self.request("POST", f"/rest/v1/rpc/{function}", json=params or {})
        data = response.json() if response.content else None
        return QueryResult(data=data)

    async def health_check(self) -> bool:
        """Check the auth API answers (used by ``agape doctor``)."""
        try:
            await self.request("GET", "/auth/v1/health")
            return True
        except BackendError:
            return False

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
