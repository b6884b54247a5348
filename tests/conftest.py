"""Shared test fixtures for d1query."""

import json
from typing import Any

import httpx
import pytest

from d1query import D1Client

ACCOUNT_ID = "acc123"
DATABASE_ID = "db456"
API_TOKEN = "secret-token"


def d1_body(rows: list[dict[str, Any]] | None = None, **meta: Any) -> dict[str, Any]:
    """Build a successful D1 response body."""
    return {
        "success": True,
        "errors": [],
        "messages": [],
        "result": [{"results": rows or [], "success": True, "meta": meta}],
    }


class FakeD1:
    """Stand-in for the D1 API, served through ``httpx.MockTransport``.

    Queued replies are returned in order; once the queue is empty every
    request gets an empty success. Every request is recorded.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.replies: list[Any] = []

    def reply(self, body: Any = None, status: int = 200) -> None:
        self.replies.append(httpx.Response(status, json=body if body is not None else d1_body()))

    def reply_text(self, text: str, status: int = 200) -> None:
        self.replies.append(httpx.Response(status, text=text))

    def fail_with(self, exc: Exception) -> None:
        self.replies.append(exc)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0) if self.replies else httpx.Response(200, json=d1_body())
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]

    @property
    def last(self) -> dict[str, Any]:
        return self.payloads[-1]


@pytest.fixture
def fake_d1() -> FakeD1:
    return FakeD1()


@pytest.fixture
def client(fake_d1: FakeD1):
    with D1Client(
        ACCOUNT_ID,
        DATABASE_ID,
        API_TOKEN,
        transport=httpx.MockTransport(fake_d1.handler),
    ) as d1:
        yield d1
