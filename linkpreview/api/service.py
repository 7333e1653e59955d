"""Service layer: orchestrates preview operations for the API routes."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import quote, urlparse

import httpx

from linkpreview.api.schemas import Metadata
from linkpreview.cache.redis import ResponseCache
from linkpreview.config import Settings
from linkpreview.preview import extract_metadata, retrieve, upstream_error_message

logger = logging.getLogger(__name__)

_VALID_SCHEMES = {"http", "https"}
_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


class AvatarError(Exception):
    """The avatar could not be produced; ``status_code`` is client-facing."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


@dataclass(frozen=True)
class AvatarImage:
    content: bytes
    content_type: str


def is_previewable_url(url: str | None) -> bool:
    """Absolute http(s) URL with a host."""
    if not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in _VALID_SCHEMES and bool(parsed.netloc)


def is_valid_username(username: str) -> bool:
    return bool(_USERNAME_RE.match(username))


def profile_url(template: str, username: str) -> str:
    return template.format(username=quote(username, safe=""))


async def preview(
    client: httpx.AsyncClient,
    cache: ResponseCache | None,
    url: str,
) -> Metadata:
    """Run the extraction pipeline for one URL."""
    logger.info("preview requested", extra={"url": url})
    return await extract_metadata(client, url, cache)


async def fetch_avatar(
    client: httpx.AsyncClient,
    cache: ResponseCache | None,
    settings: Settings,
    username: str,
) -> AvatarImage:
    """Resolve *username*'s profile image via its page preview and fetch it."""
    page_url = profile_url(settings.avatar_profile_url_template, username)
    logger.info("avatar requested", extra={"username": username, "profile_url": page_url})

    metadata = await extract_metadata(client, page_url, cache)
    if metadata.error:
        raise AvatarError(502, metadata.error)
    if not metadata.image:
        raise AvatarError(404, f"No image found for {username}")

    image = await retrieve(client, metadata.image, cache)
    if image.status_code >= 400:
        raise AvatarError(502, upstream_error_message(image.status_code, metadata.image))

    return AvatarImage(
        content=image.content,
        content_type=image.content_type or "application/octet-stream",
    )
