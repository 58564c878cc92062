"""
Pytest configuration and shared fixtures for the test suite.

HTTP behaviour is exercised against ``FakeKickUpstream``, an in-process
aiohttp application standing in for the Kick token, REST and
subscription endpoints.
"""

import logging
import pytest
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from aiohttp import web
from aiohttp.test_utils import TestServer

from kickclient.api.client import KickApiClient
from kickclient.config.settings import GlobalConfig, KickCredentials


TEST_START = datetime(2026, 1, 1, 12, 0, 0)


class FakeClock:
    """Controllable replacement for ``datetime.now``."""

    def __init__(self, start: datetime = TEST_START):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class FakeKickUpstream:
    """Records requests and serves canned Kick API responses."""

    def __init__(self):
        self.base_url = ""
        self.calls: List[Tuple[str, str]] = []
        self.token_requests: List[Dict[str, Any]] = []
        self.api_requests: List[web.Request] = []
        self.subscription_requests: List[Dict[str, Any]] = []

        self.token_status = 200
        self.token_response: Any = {"access_token": "abc", "token_type": "Bearer", "expires_in": 10}
        self.subscription_status = 200
        self.subscription_response: Any = {"data": [{"name": "chat.message.sent", "version": 1}]}

        self.channels: Dict[str, Dict[str, Any]] = {}
        # path -> (status, body) overrides for API routes
        self.overrides: Dict[str, Tuple[int, Any]] = {}
        self.categories = [{"id": 1, "name": "Just Chatting"}, {"id": 2, "name": "Slots"}]

    def create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/oauth/token", self._token)
        app.router.add_post("/public/v1/events/subscriptions", self._subscribe)
        app.router.add_get("/channels", self._channel)
        app.router.add_get("/channels/live", self._api)
        app.router.add_get("/channels/{slug}/followers", self._api)
        app.router.add_get("/search/channels", self._api)
        app.router.add_get("/users/{username}", self._api)
        app.router.add_get("/categories", self._categories)
        app.router.add_get("/categories/{category_id}/streams", self._api)
        return app

    @property
    def token_url(self) -> str:
        return f"{self.base_url}/oauth/token"

    @property
    def subscriptions_url(self) -> str:
        return f"{self.base_url}/public/v1/events/subscriptions"

    def last_api_request(self) -> web.Request:
        return self.api_requests[-1]

    async def _token(self, request: web.Request) -> web.Response:
        form = await request.post()
        self.calls.append(("POST", request.path))
        self.token_requests.append({
            "form": dict(form),
            "content_type": request.headers.get("Content-Type", "")
        })
        if self.token_status >= 400:
            return web.json_response({"error": "invalid_client"}, status=self.token_status)
        return web.json_response(self.token_response, status=self.token_status)

    async def _subscribe(self, request: web.Request) -> web.Response:
        self.subscription_requests.append({
            "body": await request.json(),
            "authorization": request.headers.get("Authorization")
        })
        if self.subscription_status >= 400:
            return web.Response(status=self.subscription_status, text="forbidden")
        return web.json_response(self.subscription_response, status=self.subscription_status)

    def _record(self, request: web.Request) -> Optional[web.Response]:
        self.calls.append((request.method, request.path))
        self.api_requests.append(request)
        if request.path in self.overrides:
            status, body = self.overrides[request.path]
            return web.json_response(body, status=status)
        return None

    async def _channel(self, request: web.Request) -> web.Response:
        override = self._record(request)
        if override is not None:
            return override
        slug = request.query.get("slug")
        if slug not in self.channels:
            return web.json_response({"message": "Not found"}, status=404)
        return web.json_response(self.channels[slug])

    async def _categories(self, request: web.Request) -> web.Response:
        override = self._record(request)
        if override is not None:
            return override
        return web.json_response(self.categories)

    async def _api(self, request: web.Request) -> web.Response:
        override = self._record(request)
        if override is not None:
            return override
        return web.json_response({"data": [], "path": request.path, "query": dict(request.query)})


@pytest.fixture
def clock():
    """Clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
async def kick_upstream():
    """Start the fake Kick upstream on a local port."""
    upstream = FakeKickUpstream()
    server = TestServer(upstream.create_app())
    await server.start_server()
    upstream.base_url = f"http://{server.host}:{server.port}"
    yield upstream
    await server.close()


@pytest.fixture
def credentials(kick_upstream):
    """Credentials pointing at the fake upstream."""
    return KickCredentials(
        client_id="test-client-id",
        client_secret="test-client-secret",
        token_url=kick_upstream.token_url,
        api_base_url=kick_upstream.base_url
    )


@pytest.fixture
async def api_client(credentials, clock):
    """API client bound to the fake upstream and the test clock."""
    client = KickApiClient(credentials, timeout=5, clock=clock)
    yield client
    await client.close()


@pytest.fixture
def sample_livestream():
    return {
        "id": 101,
        "slug": "teststreamer-session",
        "channel_id": 7,
        "created_at": "2026-01-01 11:00:00",
        "session_title": "Testing all day",
        "is_live": True,
        "duration": 3600,
        "language": "English",
        "is_mature": False,
        "viewer_count": 1234,
        "thumbnail": {"url": "https://example.com/thumb.jpg"}
    }


@pytest.fixture
def sample_channel(sample_livestream):
    return create_test_channel("teststreamer", livestream=sample_livestream)


def create_test_channel(slug: str = "teststreamer", livestream: Optional[Dict[str, Any]] = None,
                        **overrides) -> Dict[str, Any]:
    """Create a channel payload shaped like the Kick API response."""
    channel = {
        "id": 7,
        "user_id": 70,
        "slug": slug,
        "is_banned": False,
        "playback_url": f"https://example.com/{slug}.m3u8",
        "vod_enabled": True,
        "subscription_enabled": True,
        "followersCount": 5000,
        "banner_image": {"url": "https://example.com/banner.png"},
        "livestream": livestream,
        "user": {"id": 70, "username": slug.capitalize()}
    }
    channel.update(overrides)
    return channel


def create_test_config(upstream: FakeKickUpstream, **overrides) -> GlobalConfig:
    """Create a configuration pointing at the fake upstream."""
    defaults = {
        'kick_client_id': "test-client-id",
        'kick_client_secret': "test-client-secret",
        'token_url': upstream.token_url,
        'api_base_url': upstream.base_url,
        'request_timeout': 5,
        'log_level': "INFO",
        'log_format': "console",
        'subscriptions_url': upstream.subscriptions_url,
        'example_channel': "teststreamer",
        'monitor_channel': "teststreamer"
    }
    defaults.update(overrides)
    return GlobalConfig(**defaults)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handler and propagation changes made by configure_logging."""
    yield
    package_logger = logging.getLogger("kickclient")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
