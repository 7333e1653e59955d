"""Redis client: subrequest response cache with TTL."""

from __future__ import annotations

import logging
from urllib.parse import urlsplit, urlunsplit

import redis.asyncio as redis
from pydantic import ValidationError
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

from linkpreview.preview.models import RawResponse

logger = logging.getLogger(__name__)

KEY_PREFIX = "fetch:"


class ResponseCache:
    """Thin async wrapper around Redis for caching outbound subrequests."""

    def __init__(self, client: redis.Redis, default_ttl: int = 300) -> None:
        self._client = client
        self._default_ttl = default_ttl

    async def get(self, url: str) -> RawResponse | None:
        """Return the cached response for *url*, or ``None`` on miss / error."""
        try:
            raw = await self._client.get(f"{KEY_PREFIX}{url}")
            if raw is None:
                logger.debug("cache miss", extra={"url": url})
                return None
            logger.debug("cache hit", extra={"url": url})
            return RawResponse.model_validate_json(raw)
        except redis.RedisError:
            logger.warning("cache get failed", extra={"url": url}, exc_info=True)
            return None
        except ValidationError:
            logger.warning("cache entry unreadable", extra={"url": url}, exc_info=True)
            return None

    async def set(
        self, url: str, response: RawResponse, ttl: int | None = None
    ) -> bool:
        """Store *response* with a TTL. Returns ``False`` on error."""
        effective_ttl = ttl if ttl is not None else self._default_ttl
        try:
            await self._client.set(
                f"{KEY_PREFIX}{url}",
                response.model_dump_json(),
                ex=effective_ttl,
            )
            logger.debug("cache set", extra={"url": url, "ttl": effective_ttl})
            return True
        except redis.RedisError:
            logger.warning("cache set failed", extra={"url": url}, exc_info=True)
            return False


def redact_url(redis_url: str) -> str:
    """Drop any credentials from *redis_url* so it can be logged."""
    parts = urlsplit(redis_url)
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, host, parts.path, "", ""))


async def create_redis_client(redis_url: str, *, timeout: float = 2.0) -> redis.Redis:
    """Connect to the cache; *timeout* bounds each Redis call on the request path."""
    logger.info("connecting to redis", extra={"redis_url": redact_url(redis_url)})
    retry = Retry(ExponentialBackoff(cap=timeout), retries=2)
    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=timeout,
        socket_timeout=timeout,
        health_check_interval=30,
        retry=retry,
        retry_on_error=[redis.ConnectionError, redis.TimeoutError],
    )
