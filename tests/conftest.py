"""Fixtures: mock upstream web, in-memory Redis, test app."""

from collections.abc import Callable

import httpx
import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis

from linkpreview.cache.redis import ResponseCache
from linkpreview.config import Settings
from linkpreview.main import create_app

Handler = Callable[[httpx.Request], httpx.Response]


def html_response(
    body: str | bytes,
    *,
    status_code: int = 200,
    content_type: str = "text/html; charset=utf-8",
) -> httpx.Response:
    content = body.encode("utf-8") if isinstance(body, str) else body
    return httpx.Response(
        status_code,
        headers={"content-type": content_type},
        content=content,
    )


def mock_client(handler: Handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by *handler*."""
    return httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        follow_redirects=True,
    )


@pytest_asyncio.fixture
async def response_cache():
    """ResponseCache backed by an in-memory FakeRedis instance."""
    client = FakeRedis(decode_responses=True)
    cache = ResponseCache(client, default_ttl=300)
    yield cache
    await client.aclose()


@pytest.fixture
def settings() -> Settings:
    return Settings(redis_url="", response_max_age=600)


@pytest.fixture
def make_app(settings: Settings):
    """Build an app wired to a mock upstream, bypassing the lifespan."""

    def _make(handler: Handler, cache: ResponseCache | None = None):
        app = create_app(settings)
        app.state.client = mock_client(handler)
        app.state.cache = cache
        return app

    return _make
