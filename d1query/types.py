"""Type definitions for the D1 client."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from .exceptions import D1Error, QueryError


class ResultKind(str, Enum):
    """Outcome of executing a single statement."""

    ROWS = "rows"
    EMPTY = "empty"
    FAILURE = "failure"


@dataclass
class QueryResult:
    """Result of executing a statement against D1.

    A failed result is falsy. Both ``ROWS`` and ``EMPTY`` are truthy, so a
    statement that ran and returned nothing can be told apart from one that
    failed with a plain ``if result:``.
    """

    kind: ResultKind
    rows: list[dict[str, Any]] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)
    error: D1Error | None = None

    @classmethod
    def from_response(cls, response: Any) -> "QueryResult":
        """Create QueryResult from a D1 API response body."""
        if not isinstance(response, dict):
            return cls.failure(QueryError("Malformed response body"))

        if response.get("success") is False:
            errors = response.get("errors")
            if not isinstance(errors, list):
                errors = []
            message = "\n".join(
                str(error.get("message", "")) for error in errors if isinstance(error, dict)
            )
            code = None
            if errors and isinstance(errors[0], dict) and errors[0].get("code") is not None:
                code = str(errors[0]["code"])
            return cls.failure(QueryError(message or "Query failed", code))

        # Only the first statement's block is consumed
        blocks = response.get("result")
        block = blocks[0] if isinstance(blocks, list) and blocks else None
        if not isinstance(block, dict) or not isinstance(block.get("results"), list):
            return cls.failure(QueryError("Response carried no result set"))

        rows = block["results"]
        meta = block.get("meta") or {}
        if rows:
            return cls(kind=ResultKind.ROWS, rows=rows, meta=meta)
        return cls(kind=ResultKind.EMPTY, meta=meta)

    @classmethod
    def failure(cls, error: D1Error) -> "QueryResult":
        """Create a failed QueryResult holding ``error``."""
        return cls(kind=ResultKind.FAILURE, error=error)

    @property
    def ok(self) -> bool:
        return self.kind is not ResultKind.FAILURE

    def first(self) -> dict[str, Any] | None:
        """Return the first row, or None when there is none."""
        return self.rows[0] if self.rows else None

    def raise_for_error(self) -> "QueryResult":
        """Raise the held error if this result is a failure.

        Returns:
            The result itself, so calls can be chained.
        """
        if self.error is not None:
            raise self.error
        return self

    def __bool__(self) -> bool:
        return self.ok

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.rows)
