from __future__ import annotations

import os

# Settings are cached on first use; make sure tests never need a real key
os.environ.setdefault("GLADIA_API_KEY", "test-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections import defaultdict, deque
from typing import Any

import httpx
import pytest
import pytest_asyncio

from app.config.settings import Settings
from app.connector.services.gladia_client import open_client
from app.connector.services.metrics import metrics


BASE = "https://api.gladia.io"


class FakeGladia:
    """Scripted Gladia API: queued replies per (method, url), every request recorded."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._replies: dict[tuple[str, str], deque[Any]] = defaultdict(deque)

    def reply(self, method: str, url: str, *replies: Any) -> None:
        self._replies[(method, url)].extend(replies)

    def calls(self, method: str, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and str(r.url) == url]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._replies.get((request.method, str(request.url)))
        if not queue:
            raise AssertionError(f"unexpected request {request.method} {request.url}")
        reply = queue.popleft()
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeClock:
    """Millisecond clock that only moves when the poll loop sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds * 1000


@pytest.fixture(autouse=True)
def _fresh_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def settings() -> Settings:
    return Settings(gladia_api_key="test-key", gladia_base_url=BASE, connector_secret="")


@pytest.fixture
def fake() -> FakeGladia:
    return FakeGladia()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def client(fake: FakeGladia, settings: Settings):
    async with open_client(settings, transport=fake.transport()) as c:
        yield c
