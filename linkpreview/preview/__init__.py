"""Page preview pipeline: fetch, decode, extract."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from linkpreview.api.schemas import Metadata

from .decoder import decode_page, detect_charset
from .extractor import RULES, extract, resolve_url
from .fetcher import build_client, fetch_page, retrieve
from .models import DecodedPage, RawResponse, UpstreamError

if TYPE_CHECKING:
    from linkpreview.cache.redis import ResponseCache

__all__ = [
    "DecodedPage",
    "RULES",
    "RawResponse",
    "UpstreamError",
    "build_client",
    "decode_page",
    "detect_charset",
    "extract",
    "extract_metadata",
    "fetch_page",
    "resolve_url",
    "retrieve",
    "upstream_error_message",
]

logger = logging.getLogger(__name__)


def upstream_error_message(status_code: int, url: str) -> str:
    return f"Upstream responded with status {status_code} for {url}"


async def extract_metadata(
    client: httpx.AsyncClient,
    url: str,
    cache: ResponseCache | None = None,
) -> Metadata:
    """Fetch *url* and return its preview record.

    An upstream status >= 400 yields a record carrying only ``error``.
    Transport failures are raised as ``httpx.TransportError``.
    """
    outcome = await fetch_page(client, url, cache)
    if isinstance(outcome, UpstreamError):
        return Metadata(error=upstream_error_message(outcome.status_code, url))

    metadata = extract(outcome.document, url, outcome.charset)
    logger.debug(
        "metadata extracted",
        extra={
            "url": url,
            "charset": outcome.charset,
            "has_title": metadata.title is not None,
            "has_image": metadata.image is not None,
        },
    )
    return metadata
