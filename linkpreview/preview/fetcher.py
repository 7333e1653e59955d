"""Outbound page retrieval with an optional subrequest cache."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from .decoder import decode_page
from .models import FetchOutcome, RawResponse, UpstreamError

if TYPE_CHECKING:
    from linkpreview.cache.redis import ResponseCache

logger = logging.getLogger(__name__)


def build_client(*, timeout: float, user_agent: str) -> httpx.AsyncClient:
    """Create the pooled client used for every outbound fetch."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=timeout,
        headers={"User-Agent": user_agent},
    )


def _is_cacheable(status_code: int) -> bool:
    # 2xx-4xx are stable enough to reuse; server errors are retried next time
    return status_code < 500


async def retrieve(
    client: httpx.AsyncClient,
    url: str,
    cache: ResponseCache | None = None,
) -> RawResponse:
    """GET *url* following redirects and return the raw, undecoded response.

    Transport errors (DNS, TLS, connect, timeouts) are not retried and
    propagate to the caller.
    """
    if cache is not None:
        cached = await cache.get(url)
        if cached is not None:
            return cached

    logger.debug("fetching", extra={"url": url})
    resp = await client.get(url)
    raw = RawResponse(
        status_code=resp.status_code,
        url=str(resp.url),
        content_type=resp.headers.get("content-type", ""),
        content=resp.content,
    )
    logger.debug(
        "fetched",
        extra={
            "url": url,
            "final_url": raw.url,
            "status_code": raw.status_code,
            "content_length": len(raw.content),
        },
    )

    if cache is not None and _is_cacheable(raw.status_code):
        await cache.set(url, raw)
    return raw


async def fetch_page(
    client: httpx.AsyncClient,
    url: str,
    cache: ResponseCache | None = None,
) -> FetchOutcome:
    """Fetch *url* and decode it, or report the upstream error status."""
    raw = await retrieve(client, url, cache)
    if raw.status_code >= 400:
        logger.info(
            "upstream error",
            extra={"url": url, "status_code": raw.status_code},
        )
        return UpstreamError(status_code=raw.status_code)
    return decode_page(raw)
