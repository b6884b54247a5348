"""Cloudflare D1 HTTP client."""

import logging
from typing import Any, Sequence

import httpx

from .builder import QueryBuilder
from .config import DEFAULT_API_BASE_URL, D1Settings, get_settings
from .exceptions import ConnectionError, D1Error, QueryError
from .types import QueryResult

logger = logging.getLogger(__name__)


class D1Client:
    """HTTP client for the Cloudflare D1 query API.

    Args:
        account_id: Cloudflare account identifier.
        database_id: D1 database identifier.
        api_token: API token sent as a bearer credential.
        base_url: Root of the Cloudflare v4 REST API.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport``).

    Example:
        >>> client = D1Client(account_id, database_id, api_token)
        >>> users = client.table("users").where("status", "=", "active").get()
        >>> print(f"Found {len(users)} users")
    """

    def __init__(
        self,
        account_id: str,
        database_id: str,
        api_token: str,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.account_id = account_id
        self.database_id = database_id
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_token}",
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_settings(cls, settings: D1Settings | None = None, **kwargs: Any) -> "D1Client":
        """Create a client from ``D1Settings`` (the environment by default)."""
        settings = settings or get_settings()
        return cls(
            settings.account_id,
            settings.database_id,
            settings.api_token,
            base_url=settings.api_base_url,
            timeout=settings.timeout,
            **kwargs,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "D1Client":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def url(self) -> str:
        """Query endpoint of the configured database."""
        return (
            f"{self.base_url}/accounts/{self.account_id}"
            f"/d1/database/{self.database_id}/query"
        )

    def table(self, name: str) -> QueryBuilder:
        """Start a ``SELECT * FROM <name>`` statement.

        Returns:
            A new QueryBuilder bound to this client.
        """
        return QueryBuilder(self, name)

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> QueryResult:
        """Execute one SQL statement.

        Args:
            sql: Statement, with ``?`` placeholders for bound values.
            params: Values for the placeholders, in order.

        Returns:
            QueryResult of kind ``ROWS`` when rows came back, ``EMPTY`` when
            the statement ran without returning rows, ``FAILURE`` otherwise.
            Failures are logged and returned, never raised.
        """
        payload: dict[str, Any] = {"sql": sql}
        if params:
            payload["params"] = list(params)
        logger.debug("Executing %s (%d params)", sql, len(params or ()))

        try:
            response = self._client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            return self._fail(ConnectionError(f"Query failed: {e}"))

        try:
            body = response.json()
        except ValueError:
            return self._fail(
                QueryError(
                    f"Malformed response (HTTP {response.status_code})",
                    str(response.status_code),
                )
            )

        result = QueryResult.from_response(body)
        if result.error is not None:
            logger.error("D1 query failed: %s", result.error.message)
        return result

    def _fail(self, error: D1Error) -> QueryResult:
        logger.error("D1 query failed: %s", error.message)
        return QueryResult.failure(error)

    def create_table(
        self, table: str, columns: str | Sequence[str], *, if_not_exists: bool = False
    ) -> QueryResult:
        """Create a table.

        Args:
            table: Name of the table to create.
            columns: Column definitions, e.g. ``["id INTEGER PRIMARY KEY", "name TEXT"]``.
            if_not_exists: Add ``IF NOT EXISTS``.
        """
        if isinstance(columns, str):
            columns = [columns]
        exists = "IF NOT EXISTS " if if_not_exists else ""
        return self.execute(f"CREATE TABLE {exists}{table} ({', '.join(columns)})")

    def drop_table(self, table: str, *, if_exists: bool = False) -> QueryResult:
        """Drop a table."""
        exists = "IF EXISTS " if if_exists else ""
        return self.execute(f"DROP TABLE {exists}{table}")

    def add_column(self, table: str, definition: str) -> QueryResult:
        """Add a column, e.g. ``add_column("users", "age INTEGER")``."""
        return self.execute(f"ALTER TABLE {table} ADD {definition}")

    def update_column(self, table: str, old_name: str, new_name: str) -> QueryResult:
        """Rename a column.

        SQLite cannot change a column's type in place; only renames are
        supported.
        """
        return self.execute(f"ALTER TABLE {table} RENAME COLUMN {old_name} TO {new_name}")

    def drop_column(self, table: str, column: str) -> QueryResult:
        """Drop a column."""
        return self.execute(f"ALTER TABLE {table} DROP COLUMN {column}")
