"""Cloudflare D1 Python Client.

A fluent query builder for Cloudflare D1 over its HTTP/JSON query API.

Usage:
    from d1query import D1Client

    client = D1Client(account_id, database_id, api_token)

    # Query rows
    users = client.table("users").where("status", "=", "active").get()

    # Insert a row
    result = client.table("users").insert({"name": "Alice", "email": "alice@example.com"})

    # Update rows
    client.table("users").update({"status": "inactive"}).where("id", "=", 7).get()

    # Delete rows
    client.table("users").delete().where("id", "=", 7).get()
"""

from .builder import QueryBuilder
from .client import D1Client
from .config import D1Settings, get_settings
from .exceptions import D1Error, ConnectionError, QueryError, ValidationError
from .types import QueryResult, ResultKind

__version__ = "0.1.0"
__all__ = [
    "D1Client",
    "D1Settings",
    "get_settings",
    "QueryBuilder",
    "D1Error",
    "ConnectionError",
    "QueryError",
    "ValidationError",
    "QueryResult",
    "ResultKind",
]
