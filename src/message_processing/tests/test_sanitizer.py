"""
Tests for the Skype markup rewrite table and the HTML allow-list filter.
"""

from __future__ import annotations

from message_processing.emoji import SKYPE_EMOJI, parse_skype_emoji
from message_processing.patterns import CONTENT_PATTERNS
from message_processing.sanitizer import (
    apply_content_patterns,
    parse_message_content,
    plain_text,
    sanitize_html,
    strip_html,
)


def test_content_patterns_keep_documented_order() -> None:
    """The rewrite table should start with emoji and end with attribution removal."""

    sources = [pattern.pattern for pattern, _ in CONTENT_PATTERNS]
    assert len(sources) == 8
    assert sources[0].startswith("<ss")
    assert sources[1].startswith("<a href")
    assert sources[2].startswith("<b>")
    assert sources[3].startswith("<at id")
    assert "location" in sources[4]
    assert sources[5].startswith("<e_m")
    assert sources[6].startswith("<bing-response>")
    assert sources[7].startswith("<attribution")


def test_pattern_order_changes_link_output() -> None:
    """Emoji must be unwrapped before links so the link rewrite can match."""

    markup = '<a href="https://example.com"><ss type="smile">:)</ss></a>'

    in_order = apply_content_patterns(markup)
    reordered = apply_content_patterns(
        markup, (CONTENT_PATTERNS[1], CONTENT_PATTERNS[0])
    )

    assert in_order == (
        '<a href="https://example.com" target="_blank" '
        'rel="noopener noreferrer">:)</a>'
    )
    assert reordered == '<a href="https://example.com">:)</a>'


def test_parse_message_content_converts_links_bold_and_mentions() -> None:
    """Links gain safe attributes, bold becomes strong, mentions get an @."""

    assert (
        parse_message_content('<a href="https://example.com">site</a>')
        == '<a href="https://example.com" target="_blank" '
        'rel="noopener noreferrer">site</a>'
    )
    assert parse_message_content("<b>hi</b>") == "<strong>hi</strong>"
    assert (
        parse_message_content('<at id="8:bob">Bob</at> ping')
        == "<strong>@Bob</strong> ping"
    )


def test_parse_message_content_removes_wrapper_elements() -> None:
    """Location, emoji placeholders and attribution wrappers disappear."""

    assert parse_message_content('<location lat="1"></location>hello') == "hello"
    assert parse_message_content('a<e_m a="1" />b') == "ab"
    assert parse_message_content('text<attribution name="x">src</attribution>') == "text"


def test_parse_message_content_unwraps_bing_response_across_lines() -> None:
    """The bing-response wrapper is unwrapped even when it spans lines."""

    content = "<bing-response>line one\nline two</bing-response>"
    assert parse_message_content(content) == "line one\nline two"


def test_parse_message_content_converts_known_emoji() -> None:
    """Known shorthand emoji become Unicode; unknown ones keep their text."""

    assert parse_message_content('<ss type="smile">:)</ss>') == "\U0001F642"
    assert parse_message_content('<ss type="zzzz">(zzzz)</ss>') == "(zzzz)"
    assert parse_skype_emoji("plain") == "plain"


def test_parse_message_content_handles_empty_input() -> None:
    """Empty content yields an empty string."""

    assert parse_message_content("") == ""
    assert sanitize_html("") == ""


def test_sanitize_html_drops_scripts_and_unknown_markup() -> None:
    """Scripts and styles are removed with their contents; other tags unwrap."""

    assert sanitize_html("hi<script>alert(1)</script>") == "hi"
    assert sanitize_html("<style>p { color: red }</style>ok") == "ok"
    assert sanitize_html("<div><span>x</span></div>") == "x"
    assert sanitize_html("a<!-- hidden -->b") == "ab"


def test_sanitize_html_strips_disallowed_attributes() -> None:
    """Event handlers and unknown attributes are removed from allowed tags."""

    assert sanitize_html('<em onclick="steal()" class="x">a</em>') == "<em>a</em>"
    assert (
        sanitize_html('<a href="https://e.com" onmouseover="x()">e</a>')
        == '<a href="https://e.com">e</a>'
    )


def test_parse_message_content_drops_script_links() -> None:
    """A javascript: href never survives sanitization."""

    result = parse_message_content('<a href="javascript:alert(1)">click</a>')

    assert "javascript" not in result
    assert "click" in result


def test_strip_html_treats_tags_as_opaque() -> None:
    """strip_html keeps only text outside tags and unescapes entities."""

    assert strip_html('a<b class="x">c</b>&amp;d') == "ac&d"
    assert strip_html("a<b") == "a<b"
    assert strip_html("") == ""


def test_plain_text_converts_emoji_before_stripping() -> None:
    """plain_text renders emoji wrappers as emoji or their shortcode text."""

    assert plain_text('<ss type="heart">(heart)</ss> <b>x</b>') == f"{SKYPE_EMOJI['heart']} x"
    assert plain_text('<ss type="nope">(nope)</ss>') == "(nope)"
