"""Conversion of Skype shorthand emoji wrappers into Unicode emoji."""

from __future__ import annotations

from typing import Dict

from .patterns import SKYPE_EMOJI_PATTERN

SKYPE_EMOJI: Dict[str, str] = {
    "smile": "\U0001F642",
    "bigsmile": "\U0001F603",
    "laugh": "\U0001F604",
    "rofl": "\U0001F923",
    "wink": "\U0001F609",
    "blush": "\U0001F60A",
    "cool": "\U0001F60E",
    "sad": "\U0001F641",
    "cry": "\U0001F622",
    "surprised": "\U0001F62E",
    "angry": "\U0001F620",
    "kiss": "\U0001F617",
    "tongueout": "\U0001F61B",
    "think": "\U0001F914",
    "facepalm": "\U0001F926",
    "wave": "\U0001F44B",
    "clap": "\U0001F44F",
    "like": "\U0001F44D",
    "yes": "\U0001F44D",
    "no": "\U0001F44E",
    "heart": "❤️",
    "brokenheart": "\U0001F494",
    "flower": "\U0001F338",
    "sun": "☀️",
    "star": "⭐",
    "coffee": "☕",
    "cake": "\U0001F382",
    "music": "\U0001F3B5",
    "party": "\U0001F973",
    "sleepy": "\U0001F62A",
}


def parse_skype_emoji(content: str) -> str:
    """Replace ``<ss type="...">`` wrappers of known types with emoji.

    Unknown types are left untouched so the content pipeline can fall back to
    the shortcode text inside the wrapper.
    """

    if not content or "<ss" not in content:
        return content

    def _replace(match) -> str:
        emoji = SKYPE_EMOJI.get(match.group(1).lower())
        return emoji if emoji is not None else match.group(0)

    return SKYPE_EMOJI_PATTERN.sub(_replace, content)
