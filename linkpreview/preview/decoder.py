"""Charset detection and two-pass decoding of fetched pages.

The body is first decoded as UTF-8 purely to look for an in-document
encoding declaration (the sniff pass). Once the real charset is known the
raw bytes are decoded again with it, unless it is UTF-8 and the sniff
document can be reused as-is.

Precedence is fixed: the ``Content-Type`` header, then ``<meta charset>``,
then ``<meta http-equiv="Content-Type">``, then UTF-8.
"""

from __future__ import annotations

import codecs
import logging
import re

from bs4 import BeautifulSoup

from .models import DecodedPage, RawResponse

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"

_CHARSET_PARAM_RE = re.compile(r"charset\s*=\s*([^;]+)", re.IGNORECASE)
_QUOTES = "\"'"


def _clean_label(value: str | None) -> str | None:
    if value is None:
        return None
    label = value.strip().strip(_QUOTES).strip().casefold()
    return label or None


def charset_from_content_type(content_type: str | None) -> str | None:
    """Pull the ``charset=`` parameter out of a Content-Type value."""
    if not content_type:
        return None
    match = _CHARSET_PARAM_RE.search(content_type)
    if match is None:
        return None
    return _clean_label(match.group(1))


def parse_html(text: str) -> BeautifulSoup:
    return BeautifulSoup(text, "html.parser")


def sniff_document(content: bytes) -> BeautifulSoup:
    """Decode *content* as UTF-8 (lossy) and parse it."""
    return parse_html(content.decode(DEFAULT_CHARSET, errors="replace"))


def _meta_charset(document: BeautifulSoup) -> str | None:
    for tag in document.select("meta[charset]"):
        label = _clean_label(tag.get("charset"))
        if label:
            return label
    return None


def _meta_http_equiv(document: BeautifulSoup) -> str | None:
    for tag in document.select("meta[http-equiv][content]"):
        if tag.get("http-equiv", "").strip().lower() != "content-type":
            continue
        label = charset_from_content_type(tag.get("content"))
        if label:
            return label
    return None


def detect_charset(content_type: str | None, sniffed: BeautifulSoup) -> str:
    """Resolve the document charset from the header and the sniff document."""
    return (
        charset_from_content_type(content_type)
        or _meta_charset(sniffed)
        or _meta_http_equiv(sniffed)
        or DEFAULT_CHARSET
    )


def _codec_name(label: str) -> str | None:
    try:
        return codecs.lookup(label).name
    except LookupError:
        return None


def _redecode(raw: RawResponse, codec: str) -> BeautifulSoup | None:
    # Binary codecs (base64, zlib) and codecs without "replace" support raise here
    try:
        text = raw.content.decode(codec, errors="replace")
    except (LookupError, UnicodeError):
        return None
    return parse_html(text)


def decode_page(raw: RawResponse) -> DecodedPage:
    """Run the sniff pass, settle the charset, and build the final document.

    A label that is unknown or cannot decode text falls back to the UTF-8
    sniff document.
    """
    sniffed = sniff_document(raw.content)
    charset = detect_charset(raw.content_type, sniffed)

    codec = _codec_name(charset)
    document = sniffed
    if codec is not None and codec != DEFAULT_CHARSET:
        document = _redecode(raw, codec)

    if codec is None or document is None:
        logger.warning(
            "unusable charset, falling back to utf-8",
            extra={"url": raw.url, "charset": charset},
        )
        charset, document = DEFAULT_CHARSET, sniffed

    logger.debug("charset detected", extra={"url": raw.url, "charset": charset})
    return DecodedPage(document=document, charset=charset, final_url=raw.url)
