"""Data models for the preview pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict


class RawResponse(BaseModel):
    """One outbound GET, after redirects, before any decoding.

    Serializes to JSON with the body base64-encoded, which is how the
    subrequest cache stores it.
    """

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")

    status_code: int
    url: str  # final URL after redirects
    content_type: str
    content: bytes


@dataclass(frozen=True)
class DecodedPage:
    """A page decoded with its resolved charset and parsed into a tree."""

    document: BeautifulSoup
    charset: str
    final_url: str


@dataclass(frozen=True)
class UpstreamError:
    """The target answered with an HTTP status >= 400."""

    status_code: int


FetchOutcome = DecodedPage | UpstreamError
