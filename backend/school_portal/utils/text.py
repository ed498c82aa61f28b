"""
Slug and excerpt helpers for news content
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

EXCERPT_MAX_LENGTH = 150
FALLBACK_SLUG = "news"

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(title: str) -> str:
    """
    Derive a URL-safe slug from a title.

    Characters outside ``[a-z0-9]``, whitespace and hyphens are dropped, so
    accented letters disappear rather than being transliterated.
    """
    slug = _DISALLOWED.sub("", title.lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug).strip("-")
    return slug or FALLBACK_SLUG


def strip_html(content: str) -> str:
    return BeautifulSoup(content, "html.parser").get_text().strip()


def generate_excerpt(content: str, max_length: int = EXCERPT_MAX_LENGTH) -> str:
    """Plain-text summary cut on a word boundary."""
    text = strip_html(content)
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        return truncated[:last_space] + "..."
    return truncated + "..."
