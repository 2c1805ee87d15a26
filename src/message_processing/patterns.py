"""Pattern tables and fixed vocabularies for Skype export markup.

The content rewrite table is applied strictly in order: emoji wrappers,
links, formatting, then removal of wrapper elements Skype adds around
messages.
"""

from __future__ import annotations

import re
from typing import Pattern, Tuple

CONTENT_PATTERNS: Tuple[Tuple[Pattern[str], str], ...] = (
    # Shorthand emoji wrapper -> inner text
    (re.compile(r'<ss type="[^"]+">([^<]*)</ss>'), r"\1"),
    (
        re.compile(r'<a href="([^"]+)">([^<]*)</a>'),
        r'<a href="\1" target="_blank" rel="noopener noreferrer">\2</a>',
    ),
    (re.compile(r"<b>([^<]*)</b>"), r"<strong>\1</strong>"),
    # Mentions
    (re.compile(r'<at id="[^"]+">([^<]*)</at>'), r"<strong>@\1</strong>"),
    (re.compile(r"<(?:location|context|c_i)[^>]*>(?:</\w+>)?"), ""),
    (re.compile(r"<e_m[^>]*/>"), ""),
    (re.compile(r"<bing-response>(.*?)</bing-response>", re.DOTALL), r"\1"),
    (re.compile(r"<attribution[^>]*>.*?</attribution>"), ""),
)

ALLOWED_TAGS = frozenset({"strong", "a", "br", "sup", "em"})
ALLOWED_ATTRIBUTES = frozenset({"href", "target", "rel"})
# Removed together with everything inside them rather than unwrapped.
DROP_WITH_CONTENT_TAGS = (
    "script",
    "style",
    "iframe",
    "object",
    "embed",
    "template",
    "noscript",
    "svg",
    "math",
    "title",
    "textarea",
    "select",
)
UNSAFE_URL_SCHEMES = ("javascript:", "vbscript:", "data:")

SKYPE_EMOJI_PATTERN = re.compile(r'<ss type="([^"]+)">([^<]*)</ss>')

THREAD_TARGET_PATTERN = re.compile(r"<target>([^<]+)</target>")
THREAD_VALUE_PATTERN = re.compile(r"<value>([^<]+)</value>")

CALL_TYPE_PATTERN = re.compile(r'<partlist[^>]*type="([^"]+)"', re.IGNORECASE)
CALL_PART_PATTERN = re.compile(
    r'<part[^>]*identity="([^"]+)"[^>]*>([\s\S]*?)</part>', re.IGNORECASE
)
CALL_NAME_PATTERN = re.compile(r"<name>([^<]+)</name>", re.IGNORECASE)
CALL_DURATION_PATTERN = re.compile(r"<duration>([^<]+)</duration>", re.IGNORECASE)

ORIGINAL_NAME_PATTERN = re.compile(
    r'<OriginalName v="([^"]+)"(?:\s*/>|></OriginalName>)'
)
FILE_SIZE_PATTERN = re.compile(r'<FileSize v="(\d+)"(?:\s*/>|></FileSize>)')
URI_OBJECT_TYPE_PATTERN = re.compile(r'<URIObject[^>]*type="([^"]+)"')

MEDIA_ID_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(
        r'<URIObject[^>]*uri="https://api\.asm\.skype\.com/v1/objects/([a-zA-Z0-9-]+)"'
    ),
    re.compile(r"[?&]pic=([a-zA-Z0-9-]+)"),
    re.compile(r"[?&]file=([a-zA-Z0-9-]+)"),
)

IMAGE_EXTS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "bmp", "svg"})
VIDEO_EXTS = frozenset({"mp4", "webm", "mov", "avi", "mkv", "m4v"})
VIDEO_FILENAME_PATTERN = re.compile(
    r"\.(mp4|avi|mov|wmv|flv|webm|mkv|m4v)$", re.IGNORECASE
)

DISPLAY_NAME_PREFIX_PATTERN = re.compile(r"(\d+):(.+)")

PREVIEW_MAX_LENGTH = 100
