"""Chainable PostgREST query builder.

Mirrors the shape of the official JS client so service code reads the same
way as the queries it was designed around::

    result = await (
        client.table("crisis_families")
        .select("*")
        .eq("verified", True)
        .order("created_at", ascending=False)
        .range(0, 9)
        .execute()
    )
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from agape.backend.errors import BackendError

if TYPE_CHECKING:
    from agape.backend.client import BackendClient

logger = logging.getLogger(__name__)

# Characters that force a value to be double-quoted inside in.() / cs.{}
_RESERVED = set(',.:()"{} ')


@dataclass
class QueryResult:
    """Result of an executed query."""

    data: Any = None
    count: int | None = None


def format_value(value: Any) -> str:
    """Render a Python value as a PostgREST filter operand."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote(value: Any) -> str:
    text = format_value(value)
    if any(ch in _RESERVED for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def parse_content_range(header: str | None) -> int | None:
    """Extract the total from a ``Content-Range`` header (``0-9/42``, ``*/0``)."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1]
    if total == "*":
        return None
    try:
        return int(total)
    except ValueError:
        return None


class TableQuery:
    """A query against one table or view."""

    def __init__(self, client: "BackendClient", table: str):
        self._client = client
        self._table = table
        self._method = "GET"
        self._columns: str | None = None
        self._params: list[tuple[str, str]] = []
        self._prefer: list[str] = []
        self._body: Any = None
        self._head = False
        self._single: Literal["single", "maybe"] | None = None

    # -- Verbs ---------------------------------------------------------------

    def select(
        self,
        columns: str = "*",
        count: Literal["exact", "planned", "estimated"] | None = None,
        head: bool = False,
    ) -> "TableQuery":
        """Choose returned columns; optionally request a row count."""
        self._columns = "".join(columns.split())
        if count:
            self._prefer.append(f"count={count}")
        self._head = head
        return self

    def insert(self, rows: dict[str, Any] | list[dict[str, Any]], returning: bool = True) -> "TableQuery":
        """Insert one row or a list of rows."""
        self._method = "POST"
        self._body = rows
        self._prefer.append("return=representation" if returning else "return=minimal")
        return self

    def update(self, values: dict[str, Any]) -> "TableQuery":
        """Update the rows matched by the filters."""
        self._method = "PATCH"
        self._body = values
        self._prefer.append("return=representation")
        return self

    def delete(self) -> "TableQuery":
        """Delete the rows matched by the filters."""
        self._method = "DELETE"
        return self

    # -- Filters -------------------------------------------------------------

    def _filter(self, column: str, operator: str, operand: str) -> "TableQuery":
        self._params.append((column, f"{operator}.{operand}"))
        return self

    def eq(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "eq", format_value(value))

    def neq(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "neq", format_value(value))

    def gt(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "gt", format_value(value))

    def lt(self, column: str, value: Any) -> "TableQuery":
        return self._filter(column, "lt", format_value(value))

    def in_(self, column: str, values: Iterable[Any]) -> "TableQuery":
        joined = ",".join(_quote(v) for v in values)
        return self._filter(column, "in", f"({joined})")

    def is_(self, column: str, value: bool | None) -> "TableQuery":
        return self._filter(column, "is", format_value(value))

    def not_(self, column: str, operator: str, value: Any) -> "TableQuery":
        return self._filter(column, f"not.{operator}", format_value(value))

    def ilike(self, column: str, pattern: str) -> "TableQuery":
        return self._filter(column, "ilike", pattern)

    def contains(self, column: str, values: Iterable[Any]) -> "TableQuery":
        joined = ",".join(_quote(v) for v in values)
        return self._filter(column, "cs", "{" + joined + "}")

    def or_(self, filters: str) -> "TableQuery":
        """Raw PostgREST ``or`` expression, e.g. ``name.ilike.%x%,tags.cs.{x}``."""
        self._params.append(("or", f"({filters})"))
        return self

    # -- Modifiers -----------------------------------------------------------

    def order(self, column: str, ascending: bool = False) -> "TableQuery":
        self._params.append(("order", f"{column}.{'asc' if ascending else 'desc'}"))
        return self

    def limit(self, count: int) -> "TableQuery":
        self._params.append(("limit", str(count)))
        return self

    def range(self, start: int, end: int) -> "TableQuery":
        """Restrict to rows ``start..end`` inclusive."""
        self._params.append(("offset", str(start)))
        self._params.append(("limit", str(end - start + 1)))
        return self

    def single(self) -> "TableQuery":
        """Expect exactly one row; zero rows raises NotFoundError."""
        self._single = "single"
        return self

    def maybe_single(self) -> "TableQuery":
        """Expect zero or one row; zero rows yields ``None``."""
        self._single = "maybe"
        return self

    # -- Execution -----------------------------------------------------------

    def build_params(self) -> list[tuple[str, str]]:
        params = list(self._params)
        if self._columns is not None:
            params.insert(0, ("select", self._columns))
        return params

    async def execute(self) -> QueryResult:
        """Send the query.

        Returns:
            QueryResult with decoded rows (or one row for single queries) and count

        Raises:
            BackendError: If the API returns an error or the request fails
        """
        method = self._method
        if self._head and method == "GET":
            method = "HEAD"

        headers: dict[str, str] = {}
        if self._prefer:
            headers["Prefer"] = ",".join(self._prefer)
        if self._single == "single":
            headers["Accept"] = "application/vnd.pgrst.object+json"

        logger.debug(f"{method} {self._table} {self.build_params()}")
        response = await self._client.request(
            method,
            f"/rest/v1/{self._table}",
            params=self.build_params(),
            json=self._body,
            headers=headers,
        )

        count = parse_content_range(response.headers.get("content-range"))
        if method == "HEAD" or not response.content:
            return QueryResult(data=None, count=count)

        data = response.json()
        if self._single == "maybe":
            if isinstance(data, list):
                if len(data) > 1:
                    raise BackendError(
                        "JSON object requested, multiple rows returned",
                        status=response.status_code,
                    )
                data = data[0] if data else None

        return QueryResult(data=data, count=count)
