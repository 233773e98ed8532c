"""
Shared fixtures: a fake Webex API behind httpx.MockTransport, settings with
retry delays recorded instead of slept, and a TestClient wired to them.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import app
from app.services.webex_client import WebexClient, get_webex_client

Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response], Exception]


class FakeUpstream:
    """Scripted stand-in for an HTTP API.

    Each path gets a queue of replies; the last reply repeats once the queue
    is down to one. Every request is recorded.
    """

    def __init__(self):
        self.routes: Dict[str, List[Reply]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, *replies: Reply) -> "FakeUpstream":
        self.routes.setdefault(path, []).extend(replies)
        return self

    def calls_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for path in sorted(self.routes, key=len, reverse=True):
            if request.url.path.endswith(path):
                queue = self.routes[path]
                reply = queue.pop(0) if len(queue) > 1 else queue[0]
                if isinstance(reply, Exception):
                    raise reply
                if callable(reply):
                    return reply(request)
                return reply
        return httpx.Response(404, json={"message": f"No fake route for {request.url.path}"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_settings(**overrides: Any) -> Settings:
    values = {
        "webex_token": "test-token-1234567890",
        "webex_base_url": "https://webex.test/v1",
        "verify_on_startup": False,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def sleeps() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def webex_client(settings: Settings, upstream: FakeUpstream, sleeps: RecordingSleep) -> WebexClient:
    return WebexClient(settings=settings, transport=upstream.transport, sleep=sleeps)


@pytest.fixture
def api_client(webex_client: WebexClient):
    """TestClient for the gateway with the upstream client swapped out."""
    app.dependency_overrides[get_webex_client] = lambda: webex_client
    yield TestClient(app)
    app.dependency_overrides.pop(get_webex_client, None)


def call_item(
    time: str,
    call_type: Optional[str] = "received",
    **fields: Any,
) -> Dict[str, Any]:
    item: Dict[str, Any] = {"time": time, "number": "5551234567", "name": "Caller"}
    if call_type is not None:
        item["type"] = call_type
    item.update(fields)
    return item
