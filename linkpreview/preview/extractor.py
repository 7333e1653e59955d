"""Metadata extraction from a parsed page using ordered fallback rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from linkpreview.api.schemas import Metadata

logger = logging.getLogger(__name__)

# Sentinel attribute meaning "use the element's text content"
TEXT = None

_ABSOLUTE_PREFIXES = ("http://", "https://")
_VALID_SCHEMES = {"http", "https"}


@dataclass(frozen=True)
class Rule:
    """A CSS selector plus the attribute to read from the first match."""

    selector: str
    attribute: str | None = TEXT

    @property
    def css(self) -> str:
        # Requiring the attribute in the selector skips elements that lack it
        if self.attribute is TEXT:
            return self.selector
        return f"{self.selector}[{self.attribute}]"

    def apply(self, document: BeautifulSoup) -> str | None:
        tag = document.select_one(self.css)
        if tag is None:
            return None
        if self.attribute is TEXT:
            value = tag.get_text()
        else:
            value = tag.get(self.attribute)
            if isinstance(value, list):
                value = " ".join(value)
        # Surrounding whitespace is dropped; a blank value counts as no match
        value = (value or "").strip()
        return value or None


def _meta(prop: str) -> Rule:
    return Rule(f'meta[property="{prop}"]', "content")


RULES: dict[str, tuple[Rule, ...]] = {
    "title": (
        _meta("og:title"),
        _meta("twitter:title"),
        Rule("title"),
    ),
    "description": (
        _meta("og:description"),
        _meta("twitter:description"),
        Rule('meta[name="description"]', "content"),
    ),
    "url": (
        Rule('link[rel="canonical"]', "href"),
        _meta("og:url"),
    ),
    "image": (
        _meta("og:image"),
        _meta("twitter:image"),
    ),
}

# Fields whose values are URLs and must come out absolute
URL_FIELDS = frozenset({"url", "image"})


def resolve_url(value: str, base: str) -> str | None:
    """Make *value* absolute against *base*; ``None`` if that is impossible."""
    if value.startswith(_ABSOLUTE_PREFIXES):
        return value
    try:
        resolved = urljoin(base, value)
        parsed = urlparse(resolved)
    except ValueError:
        return None
    if parsed.scheme not in _VALID_SCHEMES or not parsed.netloc:
        return None
    return resolved


def first_match(
    document: BeautifulSoup,
    rules: tuple[Rule, ...],
    base_url: str | None = None,
) -> str | None:
    """Evaluate *rules* in order and return the first usable value.

    With *base_url* set, values are resolved to absolute URLs and a value
    that cannot be resolved counts as no match.
    """
    for rule in rules:
        value = rule.apply(document)
        if value is None:
            continue
        if base_url is not None:
            value = resolve_url(value, base_url)
            if value is None:
                logger.debug("unresolvable url skipped", extra={"selector": rule.selector})
                continue
        return value
    return None


def extract(document: BeautifulSoup, request_url: str, charset: str | None = None) -> Metadata:
    """Build the preview record for *document* fetched from *request_url*."""
    fields: dict[str, str | None] = {}
    for name, rules in RULES.items():
        base = request_url if name in URL_FIELDS else None
        fields[name] = first_match(document, rules, base)

    if fields["url"] is None:
        fields["url"] = request_url

    return Metadata(charset=charset, **fields)
