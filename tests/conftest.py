"""Shared test fixtures for the exchange client library."""

import logging
from collections.abc import Callable
from typing import Any

import httpx
import pytest
import structlog

from ccex.config import AggregatorSettings, AppSettings, CacheSettings, HttpSettings

Body = str | httpx.Response | Exception | Callable[[httpx.Request], Any]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeVenue:
    """Path-routed httpx.MockTransport that records every request.

    A route body may be a JSON string, an httpx.Response, an exception to
    raise, or a callable taking the request and returning any of those
    (sync or async).
    """

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, Body]] = {}
        self.requests: list[httpx.Request] = []

    def route(self, path: str, body: Body, status: int = 200) -> None:
        self.routes[path] = (status, body)

    def count(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        entry = self.routes.get(request.url.path)
        if entry is None:
            return httpx.Response(404, text="not found")
        status, body = entry
        if callable(body) and not isinstance(body, (httpx.Response, Exception)):
            body = body(request)
            if hasattr(body, "__await__"):
                body = await body
        if isinstance(body, Exception):
            raise body
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(
            status, content=body.encode(), headers={"Content-Type": "application/json"}
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def venue() -> FakeVenue:
    return FakeVenue()


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (30 s rate TTL, aggregator off)."""
    return AppSettings(
        log_level="DEBUG",
        http=HttpSettings(timeout=5.0),
        cache=CacheSettings(rate_ttl=30.0, board_ttl=15.0, fanout_workers=10),
        aggregator=AggregatorSettings(enabled=False),
    )


@pytest.fixture
def make_client(
    venue: FakeVenue, clock: FakeClock, mock_settings: AppSettings
) -> Callable[..., Any]:
    """Build a client class against the fake venue and clock."""

    def _make(client_cls: type, **kwargs: Any) -> Any:
        kwargs.setdefault("settings", mock_settings)
        return client_cls(
            base_url="http://localhost:4243",
            transport=venue.transport,
            clock=clock,
            **kwargs,
        )

    return _make


@pytest.fixture
def restore_logging():
    """Undo setup_logging() so later tests do not write to a closed capture stream."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
