"""Shared fixtures for gateway tests.

Upstream calls never leave the process: every outbound httpx client is built on an
httpx.MockTransport whose handler the test controls.

Usage:
    async def test_listing(upstream, upstream_client):
        upstream.respond(200, json={...})
        await upstream_client.list_connections(0, 10)
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from mtx_gateway.config import Settings
from mtx_gateway.main import create_app
from mtx_gateway.services import SessionCache, UpstreamClient
from mtx_gateway.services.session_cache import build_http_client


def make_settings(**overrides) -> Settings:
    values = {
        "BASE_URL": "http://mediamtx.test:9997/",
        "AUTH_USER": "admin",
        "AUTH_PASS": "s3cret",
        "MOCK_MODE": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def listing_payload(page_count=1, item_count=1, items=None) -> dict:
    if items is None:
        items = [
            {
                "id": "c0ffee",
                "created": "2026-10-19T10:00:00Z",
                "remoteAddr": "10.0.0.5:41234",
                "bytesReceived": 1024,
                "bytesSent": 2048,
                "session": None,
                "tunnel": "none",
            }
        ]
    return {"pageCount": page_count, "itemCount": item_count, "items": items}


class FakeUpstream:
    """Records outbound requests and replays a configurable response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responder = lambda request: httpx.Response(
            200, json=listing_payload()
        )

    def respond(self, status_code=200, *, json=None, content=None, headers=None):
        def responder(request):
            return httpx.Response(
                status_code, json=json, content=content, headers=headers
            )

        self._responder = responder

    def fail(self, exc_type=httpx.ConnectError, message="connection refused"):
        def responder(request):
            raise exc_type(message, request=request)

        self._responder = responder

    def route(self, responder):
        self._responder = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
async def session_cache(upstream):
    transport = upstream.transport
    cache = SessionCache(
        factory=lambda: build_http_client(transport=transport),
        grace_period=0,
    )
    yield cache
    await cache.aclose()


@pytest.fixture
def upstream_client(settings, session_cache, upstream):
    return UpstreamClient(settings, session_cache, transport=upstream.transport)


@pytest.fixture
def live_client(upstream):
    app = create_app(make_settings(), transport=upstream.transport)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def mock_client(upstream):
    app = create_app(make_settings(MOCK_MODE="true"), transport=upstream.transport)
    with TestClient(app) as client:
        yield client
