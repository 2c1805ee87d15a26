"""Plain-text search over normalized messages and match highlighting."""

from __future__ import annotations

import re
from html import escape, unescape
from typing import List, Optional, Sequence

from .models import NormalizedMessage
from .sanitizer import strip_html

HIGHLIGHT_MARK_OPEN = (
    '<mark style="background-color: rgba(255, 255, 0, 0.4); padding: 2px 0;">'
)
HIGHLIGHT_MARK_CLOSE = "</mark>"


def message_matches_search(message: NormalizedMessage, query: str) -> bool:
    """Case-insensitive match of ``query`` against content text or sender name.

    A blank query matches every message.
    """

    needle = query.strip().lower() if query else ""
    if not needle:
        return True
    content_text = strip_html(message.content).lower()
    display_name = (message.display_name or "").lower()
    return needle in content_text or needle in display_name


def filter_messages(
    messages: Sequence[NormalizedMessage], query: str
) -> List[NormalizedMessage]:
    if not query or not query.strip():
        return list(messages)
    return [message for message in messages if message_matches_search(message, query)]


def find_matching_message_indices(
    messages: Sequence[NormalizedMessage], query: str
) -> List[int]:
    """Return indices of matching messages; a blank query yields none."""

    if not query or not query.strip():
        return []
    return [
        index
        for index, message in enumerate(messages)
        if message_matches_search(message, query)
    ]


def _highlight_text(text: str, pattern: re.Pattern) -> str:
    # Match on the decoded run so entities such as &amp; are never split.
    plain = unescape(text)
    pieces: List[str] = []
    last_index = 0
    for match in pattern.finditer(plain):
        pieces.append(escape(plain[last_index : match.start()], quote=False))
        pieces.append(
            f"{HIGHLIGHT_MARK_OPEN}{escape(match.group(0), quote=False)}"
            f"{HIGHLIGHT_MARK_CLOSE}"
        )
        last_index = match.end()
    if not pieces:
        return text
    pieces.append(escape(plain[last_index:], quote=False))
    return "".join(pieces)


def highlight_search_match(html: str, query: str) -> str:
    """Wrap case-insensitive matches of ``query`` in a highlight mark.

    The markup is scanned once; every ``<...>`` span is copied verbatim and
    only text between tags is rewritten, so existing tags and attributes are
    never altered. Character references in text count as the character they
    stand for.
    """

    if not html or not query or not query.strip():
        return html

    pattern = re.compile(re.escape(query.strip()), re.IGNORECASE)

    parts: List[str] = []
    last_index = 0
    in_tag = False
    for index, char in enumerate(html):
        if char == "<" and not in_tag:
            if last_index < index:
                parts.append(_highlight_text(html[last_index:index], pattern))
            in_tag = True
            last_index = index
        elif char == ">" and in_tag:
            parts.append(html[last_index : index + 1])
            last_index = index + 1
            in_tag = False

    if last_index < len(html):
        remainder = html[last_index:]
        parts.append(remainder if in_tag else _highlight_text(remainder, pattern))

    return "".join(parts)


class SearchNavigator:
    """Step through matching message indices with wrap-around."""

    def __init__(self, indices: Sequence[int]) -> None:
        self.indices: List[int] = list(indices)
        self.position: Optional[int] = 0 if self.indices else None

    @classmethod
    def for_query(
        cls, messages: Sequence[NormalizedMessage], query: str
    ) -> "SearchNavigator":
        return cls(find_matching_message_indices(messages, query))

    def __len__(self) -> int:
        return len(self.indices)

    @property
    def current(self) -> Optional[int]:
        if self.position is None:
            return None
        return self.indices[self.position]

    def next(self) -> Optional[int]:
        if self.position is None:
            return None
        self.position = (self.position + 1) % len(self.indices)
        return self.current

    def previous(self) -> Optional[int]:
        if self.position is None:
            return None
        self.position = (self.position - 1) % len(self.indices)
        return self.current


__all__ = [
    "HIGHLIGHT_MARK_CLOSE",
    "HIGHLIGHT_MARK_OPEN",
    "SearchNavigator",
    "filter_messages",
    "find_matching_message_indices",
    "highlight_search_match",
    "message_matches_search",
]
