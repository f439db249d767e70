"""
Pytest configuration and shared fixtures for fetch_queue tests.
"""

import asyncio
from typing import Any

import pytest


class FakeResponse:
    """In-memory transport response."""

    def __init__(
        self,
        url: str,
        status: int = 200,
        body: str = "",
        headers: dict[str, str] | None = None,
        status_text: str = "OK",
    ) -> None:
        self.url = url
        self.status = status
        self.status_text = status_text
        self.ok = 200 <= status < 300
        self.headers = headers or {}
        self._body = body

    async def text(self) -> str:
        return self._body


class FakeTransport:
    """Transport double recording every exchange.

    Routes are keyed by url. Unknown urls answer 200 with an empty body.
    A route can be an exception instance, which is raised instead.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.routes: dict[str, Any] = {}
        self.delays: dict[str, float] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    def reply(
        self,
        url: str,
        status: int = 200,
        body: str = "",
        headers: dict[str, str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.routes[url] = (status, body, headers)
        self.delays[url] = delay

    def fail(self, url: str, error: Exception) -> None:
        self.routes[url] = error

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]

    async def __call__(self, url: str, options: dict[str, Any]) -> FakeResponse:
        self.calls.append((url, dict(options)))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(url, 0.0)
            if delay:
                await asyncio.sleep(delay)
            route = self.routes.get(url, (200, "", None))
            if isinstance(route, Exception):
                raise route
            status, body, headers = route
            return FakeResponse(url, status=status, body=body, headers=headers)
        finally:
            self.in_flight -= 1


@pytest.fixture
def transport() -> FakeTransport:
    """Provide a fresh recording transport for each test."""
    return FakeTransport()


@pytest.fixture
def base_url() -> str:
    """Provide the host used by in-memory transports."""
    return "http://testserver"
