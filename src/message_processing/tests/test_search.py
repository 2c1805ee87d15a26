"""
Tests for message search, highlighting and match navigation.
"""

from __future__ import annotations

from typing import Optional

from message_processing.models import MessageKind, NormalizedMessage
from message_processing.search import (
    HIGHLIGHT_MARK_CLOSE,
    HIGHLIGHT_MARK_OPEN,
    SearchNavigator,
    filter_messages,
    find_matching_message_indices,
    highlight_search_match,
    message_matches_search,
)


def _message(
    message_id: str, content: str, display_name: Optional[str] = None
) -> NormalizedMessage:
    return NormalizedMessage(
        id=message_id,
        display_name=display_name,
        timestamp="2021-03-05T10:00:00.000Z",
        content=content,
        kind=MessageKind.TEXT,
        sender_id="8:bob",
        is_owner=False,
        original_type_tag="RichText",
    )


MESSAGES = [
    _message("1", "Dinner at <strong>eight</strong>?", "Bob"),
    _message("2", '<a href="https://strong.example">link</a>', "Alice"),
    _message("3", "see you", "Strongbad"),
    _message("4", "DINNER was great"),
]


def test_highlight_wraps_each_text_match_and_keeps_tags() -> None:
    """Only text between tags is highlighted; attributes stay untouched."""

    html = '<a href="https://hello.com">hello</a> hello'

    result = highlight_search_match(html, "hello")

    assert result.count("<") == html.count("<") + 2 * 2
    assert result.startswith('<a href="https://hello.com">')
    assert result.count(HIGHLIGHT_MARK_OPEN) == 2
    assert result == (
        f'<a href="https://hello.com">{HIGHLIGHT_MARK_OPEN}hello'
        f"{HIGHLIGHT_MARK_CLOSE}</a> {HIGHLIGHT_MARK_OPEN}hello{HIGHLIGHT_MARK_CLOSE}"
    )


def test_highlight_is_case_insensitive_and_preserves_case() -> None:
    """Matches keep the original casing of the text."""

    result = highlight_search_match("Hello HELLO", "hello")

    assert result == (
        f"{HIGHLIGHT_MARK_OPEN}Hello{HIGHLIGHT_MARK_CLOSE} "
        f"{HIGHLIGHT_MARK_OPEN}HELLO{HIGHLIGHT_MARK_CLOSE}"
    )


def test_highlight_escapes_regex_characters() -> None:
    """Queries are matched literally."""

    result = highlight_search_match("cost (approx) $5", "(approx)")

    assert f"{HIGHLIGHT_MARK_OPEN}(approx){HIGHLIGHT_MARK_CLOSE}" in result


def test_highlight_blank_query_and_unterminated_tag() -> None:
    """Blank queries change nothing; an unterminated tag is copied verbatim."""

    assert highlight_search_match("hello", "   ") == "hello"
    assert highlight_search_match("", "x") == ""
    assert highlight_search_match("hi <a hi", "hi") == (
        f"{HIGHLIGHT_MARK_OPEN}hi{HIGHLIGHT_MARK_CLOSE} <a hi"
    )


def test_highlight_leaves_character_references_whole() -> None:
    """Entities are matched as the character they encode, never split."""

    html = "a &amp; b &lt;tag&gt;"

    assert highlight_search_match(html, "a") == (
        f"{HIGHLIGHT_MARK_OPEN}a{HIGHLIGHT_MARK_CLOSE} &amp; b &lt;t"
        f"{HIGHLIGHT_MARK_OPEN}a{HIGHLIGHT_MARK_CLOSE}g&gt;"
    )
    assert highlight_search_match(html, "&") == (
        f"a {HIGHLIGHT_MARK_OPEN}&amp;{HIGHLIGHT_MARK_CLOSE} b &lt;tag&gt;"
    )
    assert highlight_search_match(html, "<tag>") == (
        f"a &amp; b {HIGHLIGHT_MARK_OPEN}&lt;tag&gt;{HIGHLIGHT_MARK_CLOSE}"
    )
    assert highlight_search_match(html, "amp") == html
    assert highlight_search_match(html, "a").count("<") == 2 * 2


def test_search_ignores_tag_names_and_attributes() -> None:
    """Markup is stripped before matching; sender names also match."""

    assert [m.id for m in filter_messages(MESSAGES, "strong")] == ["3"]
    assert message_matches_search(MESSAGES[0], "EIGHT")
    assert message_matches_search(MESSAGES[1], "alice")
    assert not message_matches_search(MESSAGES[1], "href")


def test_blank_query_matches_all_but_finds_no_indices() -> None:
    """A blank filter keeps everything while navigation has nothing to visit."""

    assert filter_messages(MESSAGES, " ") == MESSAGES
    assert find_matching_message_indices(MESSAGES, "") == []


def test_find_matching_message_indices() -> None:
    """Indices are ascending positions of matching messages."""

    assert find_matching_message_indices(MESSAGES, "dinner") == [0, 3]


def test_navigator_wraps_around() -> None:
    """next and previous cycle through matches."""

    navigator = SearchNavigator.for_query(MESSAGES, "dinner")

    assert len(navigator) == 2
    assert navigator.current == 0
    assert navigator.next() == 3
    assert navigator.next() == 0
    assert navigator.previous() == 3


def test_navigator_without_matches() -> None:
    """An empty navigator has no position."""

    navigator = SearchNavigator([])

    assert navigator.current is None
    assert navigator.next() is None
    assert navigator.previous() is None
