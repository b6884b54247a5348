"""Fluent SQL statement builder for D1.

Every chained call returns a new, frozen ``QueryBuilder``; nothing is shared
between builders, so a partially built query can be reused as a base::

    users = client.table("users")
    adults = users.where("age", ">=", 18)
    result = adults.order_by("name").limit(20).get()

Values passed to ``where``, ``or_where``, ``where_in``, ``insert`` and
``update`` are never written into the SQL text. They are bound as ``?``
parameters and sent alongside the statement.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from .exceptions import ValidationError
from .types import QueryResult

if TYPE_CHECKING:
    from .client import D1Client

logger = logging.getLogger(__name__)

DIRECTIONS = ("ASC", "DESC")
DEFAULT_LIMIT = 1000
DEFAULT_OFFSET = 0

# SQLite binary comparison operators accepted by where/or_where
OPERATORS = frozenset(
    {"=", "==", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE", "GLOB", "IS", "IS NOT"}
)

_WHERE = re.compile(r"\bWHERE\b")


def _positive_number(value: Any) -> int | float | None:
    """Return ``value`` as a number if it is numeric and greater than zero."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        # Digit separators are not valid in SQL numerals
        if "_" in value:
            return None
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def _literal(value: Any) -> str:
    """Render a bound value as a quoted SQL literal for display."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        value = int(value)
    return "'" + str(value).replace("'", "''") + "'"


def _inline(sql: str, params: Iterable[Any]) -> str:
    """Replace ``?`` placeholders outside quoted text with literals."""
    values = iter(params)
    out = []
    quote = None
    for char in sql:
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == "?":
            try:
                out.append(_literal(next(values)))
                continue
            except StopIteration:
                pass
        out.append(char)
    return "".join(out)


@dataclass(frozen=True)
class QueryBuilder:
    """Immutable builder for a single SQL statement.

    Args:
        client: Client used by the terminal methods.
        table_name: Table the statement targets.
        sql: SQL template built so far. Defaults to ``SELECT * FROM <table>``.
        params: Values bound to the ``?`` placeholders in ``sql``, in order.
        error: Validation error recorded while building, if any. A builder
            holding an error never sends a request.

    Example:
        >>> builder = client.table("users").select(["id", "name"]).where("age", ">", 18)
        >>> builder.to_sql()
        ('SELECT id, name FROM users WHERE age > ?', [18])
        >>> builder.display_sql
        "SELECT id, name FROM users WHERE age > '18'"
    """

    client: D1Client
    table_name: str
    sql: str = ""
    params: tuple[Any, ...] = ()
    error: ValidationError | None = None

    def __post_init__(self) -> None:
        if not self.sql:
            object.__setattr__(self, "sql", f"SELECT * FROM {self.table_name}")

    def __str__(self) -> str:
        return self.display_sql

    @property
    def display_sql(self) -> str:
        """Statement with bound values rendered inline, for logs and debugging."""
        return _inline(self.sql, self.params)

    def to_sql(self) -> tuple[str, list[Any]]:
        """Return the SQL template and its bound parameters."""
        return self.sql, list(self.params)

    def _append(self, fragment: str, *params: Any) -> QueryBuilder:
        return replace(self, sql=f"{self.sql} {fragment}", params=self.params + params)

    def _invalid(self, message: str) -> QueryBuilder:
        # Keep the first error; later calls cannot make the statement valid
        if self.error is not None:
            return self
        return replace(self, error=ValidationError(message))

    def _conjunction(self, keyword: str) -> str:
        return keyword if _WHERE.search(self.sql) else "WHERE"

    # -- Statement selection ------------------------------------------------

    def table(self, name: str) -> QueryBuilder:
        """Start a new ``SELECT * FROM <name>`` statement."""
        return QueryBuilder(self.client, name)

    def select(self, columns: str | Iterable[str] = "*") -> QueryBuilder:
        """Replace ``SELECT *`` with the given column list."""
        if not isinstance(columns, str):
            columns = ", ".join(str(column) for column in columns)
        return replace(self, sql=self.sql.replace("SELECT *", f"SELECT {columns}", 1))

    def update(self, data: Mapping[str, Any]) -> QueryBuilder:
        """Start an ``UPDATE <table> SET ...`` statement.

        Usually followed by ``where`` and ``get``. Any previously built text
        and bound values are discarded.
        """
        if not isinstance(data, Mapping) or not data:
            return self._invalid(f"update() expects a non-empty mapping, got {type(data).__name__}")
        assignments = ", ".join(f"{column} = ?" for column in data)
        return replace(
            self,
            sql=f"UPDATE {self.table_name} SET {assignments}",
            params=tuple(data.values()),
            error=None,
        )

    def delete(self) -> QueryBuilder:
        """Start a ``DELETE FROM <table>`` statement."""
        return replace(self, sql=f"DELETE FROM {self.table_name}", params=(), error=None)

    # -- Clauses ------------------------------------------------------------

    def raw(self, expression: str, *params: Any) -> QueryBuilder:
        """Append ``expression`` verbatim, binding ``params`` to its placeholders."""
        return self._append(expression, *params)

    def join(self, table: str, first: str, operator: str, second: str) -> QueryBuilder:
        return self._append(f"JOIN {table} ON {first} {operator} {second}")

    def union(self, query: str | QueryBuilder) -> QueryBuilder:
        """Append ``UNION (<query>)``; a builder's bound values are carried over."""
        if isinstance(query, QueryBuilder):
            builder = self._append(f"UNION ({query.sql})", *query.params)
            if query.error is not None and builder.error is None:
                builder = replace(builder, error=query.error)
            return builder
        return self._append(f"UNION ({query})")

    def _compare(self, keyword: str, column: str, operator: str, value: Any) -> QueryBuilder:
        normalized = " ".join(str(operator).split()).upper()
        if normalized not in OPERATORS:
            return self._invalid(f"Unsupported operator: {operator!r}")
        return self._append(f"{self._conjunction(keyword)} {column} {normalized} ?", value)

    def where(self, column: str, operator: str, value: Any) -> QueryBuilder:
        """Add a condition joined with ``AND`` (or open the ``WHERE`` clause)."""
        return self._compare("AND", column, operator, value)

    def or_where(self, column: str, operator: str, value: Any) -> QueryBuilder:
        """Add a condition joined with ``OR`` (or open the ``WHERE`` clause)."""
        return self._compare("OR", column, operator, value)

    def where_in(self, column: str, values: Iterable[Any]) -> QueryBuilder:
        values = tuple(values)
        placeholders = ", ".join("?" for _ in values)
        return self._append(f"{self._conjunction('AND')} {column} IN ({placeholders})", *values)

    def order_by(self, column: str, direction: str = "ASC") -> QueryBuilder:
        if direction not in DIRECTIONS:
            logger.debug("Invalid sort direction %r, using ASC", direction)
            direction = "ASC"
        return self._append(f"ORDER BY {column} {direction}")

    def group_by(self, column: str) -> QueryBuilder:
        return self._append(f"GROUP BY {column}")

    def limit(self, number: Any) -> QueryBuilder:
        """Append ``LIMIT``; anything but a positive number becomes 1000."""
        value = _positive_number(number)
        if value is None:
            logger.debug("Invalid limit %r, using %d", number, DEFAULT_LIMIT)
            value = DEFAULT_LIMIT
        return self._append(f"LIMIT {value}")

    def offset(self, number: Any) -> QueryBuilder:
        """Append ``OFFSET``; anything but a positive number becomes 0."""
        value = _positive_number(number)
        if value is None:
            logger.debug("Invalid offset %r, using %d", number, DEFAULT_OFFSET)
            value = DEFAULT_OFFSET
        return self._append(f"OFFSET {value}")

    # -- Terminal methods ---------------------------------------------------

    def _rejected(self) -> QueryResult:
        logger.error("Statement not sent: %s", self.error.message)
        return QueryResult.failure(self.error)

    def get(self) -> QueryResult:
        """Execute the statement.

        Returns:
            QueryResult with the rows, an empty success, or the failure.
        """
        if self.error is not None:
            return self._rejected()
        return self.client.execute(self.sql, self.params)

    def first(self) -> dict[str, Any] | None:
        """Execute the statement with ``LIMIT 1`` appended.

        Returns:
            The first row, or None if there were no rows or the call failed.
        """
        if self.error is not None:
            return self._rejected().first()
        return self.client.execute(f"{self.sql} LIMIT 1", self.params).first()

    def insert(self, data: Mapping[str, Any]) -> QueryResult:
        """Insert one row into the table and return the outcome.

        Example:
            >>> client.table("users").insert({"name": "Alice", "email": "alice@example.com"})
        """
        if not isinstance(data, Mapping) or not data:
            error = ValidationError(
                f"insert() expects a non-empty mapping, got {type(data).__name__}"
            )
            logger.error("Statement not sent: %s", error.message)
            return QueryResult.failure(error)
        columns = ", ".join(data)
        placeholders = ", ".join("?" for _ in data)
        return self.client.execute(
            f"INSERT INTO {self.table_name} ({columns}) VALUES ({placeholders})",
            tuple(data.values()),
        )
