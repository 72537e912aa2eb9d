from typing import Any, Callable, Optional
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from wolflix.main import app
from wolflix.services import sources
from wolflix.services.token import TokenProvider, get_token_provider
from wolflix.services.upstream import set_client


class FakeUpstream:
    """Canned upstream answers keyed by method and URL (query string ignored)."""

    def __init__(self):
        self.routes: dict[tuple[str, str], Any] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        url: str,
        payload: Any = None,
        *,
        status: int = 200,
        method: str = "GET",
        headers: Optional[dict] = None,
    ) -> None:
        self.routes[(method, url)] = (status, payload, headers or {})

    def add_handler(self, url: str, handler: Callable[[httpx.Request], httpx.Response], method: str = "GET"):
        self.routes[(method, url)] = handler

    def calls(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if _base_url(r) == url]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, _base_url(request)))
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        if callable(route):
            return route(request)
        status, payload, headers = route
        return httpx.Response(status, json=payload, headers=headers)


def _base_url(request: httpx.Request) -> str:
    return f"{request.url.scheme}://{request.url.host}{request.url.path}"


@pytest.fixture
def upstream():
    fake = FakeUpstream()
    set_client(httpx.AsyncClient(transport=httpx.MockTransport(fake)))
    yield fake
    set_client(None)


@pytest.fixture
def token_fetch():
    return AsyncMock(side_effect=["token-1", "token-2", "token-3"])


@pytest.fixture
def token_provider(token_fetch):
    return TokenProvider(fetch=token_fetch, ttl_seconds=3600)


@pytest.fixture
def client(upstream, token_provider, monkeypatch):
    monkeypatch.setattr("wolflix.routes.tmdb.TMDB_API_KEY", "tmdb-key")
    monkeypatch.setattr(sources, "LOOKUP_RETRY_DELAY", 0)
    app.dependency_overrides[get_token_provider] = lambda: token_provider
    yield TestClient(app)
    app.dependency_overrides.clear()
