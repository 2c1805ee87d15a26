"""Helpers for turning Skype identities into readable names."""

from __future__ import annotations

from typing import Optional

from .patterns import DISPLAY_NAME_PREFIX_PATTERN


def clean_display_name(display_name: Optional[str]) -> Optional[str]:
    """Drop the numeric network prefix from a Skype identity or name.

    Skype identities look like ``"8:username"`` or ``"8:live:username"``; the
    leading number and colon are removed. Values without the prefix are
    returned unchanged and empty values become ``None``.
    """

    if not display_name:
        return None

    match = DISPLAY_NAME_PREFIX_PATTERN.fullmatch(display_name)
    if match:
        return match.group(2)
    return display_name
