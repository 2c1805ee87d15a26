"""Conversion of Skype message markup into allow-listed HTML.

Skype stores message bodies as a loose XML-ish markup. Rendering them safely
takes two stages:

1. an ordered table of regex rewrites (:data:`patterns.CONTENT_PATTERNS`)
   that maps Skype elements onto plain HTML and removes wrapper elements;
2. an allow-list filter built on BeautifulSoup that keeps only
   :data:`patterns.ALLOWED_TAGS` and :data:`patterns.ALLOWED_ATTRIBUTES`.

Every path that renders content as HTML goes through :func:`sanitize_html`.
"""

from __future__ import annotations

import html
from typing import Iterable, Pattern, Tuple

from bs4 import BeautifulSoup, Comment

from .emoji import parse_skype_emoji
from .patterns import (
    ALLOWED_ATTRIBUTES,
    ALLOWED_TAGS,
    CONTENT_PATTERNS,
    DROP_WITH_CONTENT_TAGS,
    SKYPE_EMOJI_PATTERN,
    UNSAFE_URL_SCHEMES,
)


def apply_content_patterns(
    content: str,
    patterns: Iterable[Tuple[Pattern[str], str]] = CONTENT_PATTERNS,
) -> str:
    """Apply ``(pattern, replacement)`` rewrites to ``content`` in order."""

    for pattern, replacement in patterns:
        content = pattern.sub(replacement, content)
    return content


def _is_unsafe_url(value: object) -> bool:
    if not isinstance(value, str):
        return False
    compact = "".join(value.split()).lower()
    return compact.startswith(UNSAFE_URL_SCHEMES)


def sanitize_html(markup: str) -> str:
    """Restrict ``markup`` to the allowed tags and attributes.

    Disallowed elements are unwrapped so their text survives, except for
    :data:`patterns.DROP_WITH_CONTENT_TAGS` which are removed with their
    contents. Comments and links with script-capable URL schemes are dropped.
    """

    if not markup:
        return ""

    soup = BeautifulSoup(markup, "html.parser")

    for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
        comment.extract()

    for tag in soup.find_all(DROP_WITH_CONTENT_TAGS):
        if not tag.decomposed:
            tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        tag.attrs = {
            name: value
            for name, value in tag.attrs.items()
            if name.lower() in ALLOWED_ATTRIBUTES
        }
        if _is_unsafe_url(tag.attrs.get("href")):
            del tag.attrs["href"]

    return str(soup)


def parse_message_content(content: str) -> str:
    """Convert raw Skype markup into sanitized HTML.

    Known shorthand emoji are converted first, then the rewrite table runs,
    then the allow-list filter.
    """

    if not content:
        return ""

    parsed = parse_skype_emoji(content)
    parsed = apply_content_patterns(parsed)
    return sanitize_html(parsed)


def strip_html(markup: str) -> str:
    """Return the plain text of ``markup``.

    A single pass over the string drops every ``<...>`` span and keeps the
    text outside tags; entities are unescaped afterwards. An unterminated
    ``<`` is kept as text.
    """

    if not markup:
        return ""

    parts = []
    last_index = 0
    tag_start = -1
    for index, char in enumerate(markup):
        if char == "<" and tag_start < 0:
            parts.append(markup[last_index:index])
            tag_start = index
        elif char == ">" and tag_start >= 0:
            tag_start = -1
            last_index = index + 1
    if tag_start >= 0:
        parts.append(markup[tag_start:])
    else:
        parts.append(markup[last_index:])
    return html.unescape("".join(parts))


def plain_text(content: str) -> str:
    """Return readable plain text for raw Skype markup (emoji converted)."""

    converted = parse_skype_emoji(content or "")
    converted = SKYPE_EMOJI_PATTERN.sub(r"\2", converted)
    return strip_html(converted)


__all__ = [
    "apply_content_patterns",
    "parse_message_content",
    "plain_text",
    "sanitize_html",
    "strip_html",
]
