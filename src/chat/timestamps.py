"""Timestamp parsing and display formatting for Skype export records.

Skype exports carry ISO 8601 arrival times such as
``"2021-03-05T14:02:11.123Z"``. This module provides helpers for:

* parsing timestamp labels into naive UTC ``datetime`` objects, and
* formatting them the way the message views show dates: calendar keys for
  date separators, message times and short relative ages.

All calendar arithmetic happens in UTC.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

ORDINAL_SUFFIXES = ("th", "st", "nd", "rd")
MINUTE = timedelta(minutes=1)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
WEEK = timedelta(weeks=1)


def parse_date_label(label: Optional[str]) -> Optional[datetime]:
    """Parse a timestamp label into a naive UTC datetime.

    Supported formats include:

    * ISO 8601 strings with or without a trailing ``"Z"`` and with any
      number of fractional second digits.
    * Epoch seconds represented as an integer or float string.
    * ``"%Y-%m-%d %H:%M"`` and ``"%Y-%m-%d"``, interpreted as UTC.

    Parameters
    ----------
    label:
        Raw timestamp label string to parse.

    Returns
    -------
    Optional[datetime]
        Naive UTC ``datetime`` value when parsing succeeds; otherwise ``None``.
    """

    if not label or not isinstance(label, str):
        return None
    text = label.strip()
    if not text:
        return None

    numeric_text = text.replace(".", "", 1)
    if numeric_text.isdigit():
        try:
            candidate = datetime.fromtimestamp(float(text), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
        return candidate.replace(tzinfo=None)

    candidate: Optional[datetime] = None
    iso_text = text.replace("Z", "+00:00")
    try:
        candidate = datetime.fromisoformat(iso_text)
    except ValueError:
        candidate = _parse_iso_fraction(iso_text)

    if candidate is None:
        for fmt in ("%Y-%m-%d %H:%M", "%Y-%m-%d"):
            try:
                candidate = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if candidate is None:
        return None

    if candidate.tzinfo is not None:
        candidate = candidate.astimezone(timezone.utc).replace(tzinfo=None)
    return candidate


def _parse_iso_fraction(text: str) -> Optional[datetime]:
    """Retry ISO parsing with the fractional seconds padded or trimmed to 6.

    Older interpreters only accept 3 or 6 fractional digits.
    """

    head, dot, rest = text.partition(".")
    if not dot:
        return None
    digits = ""
    for char in rest:
        if not char.isdigit():
            break
        digits += char
    suffix = rest[len(digits) :]
    try:
        return datetime.fromisoformat(f"{head}.{digits[:6].ljust(6, '0')}{suffix}")
    except ValueError:
        return None


def ordinal_suffix(day: int) -> str:
    """Return the English ordinal suffix for a day of month."""

    if 3 < day < 21:
        return "th"
    remainder = day % 10
    return ORDINAL_SUFFIXES[remainder] if remainder < len(ORDINAL_SUFFIXES) else "th"


def format_date_key(value: datetime) -> str:
    """Return a calendar label such as ``"5 March 2021"``."""

    return f"{value.day} {value.strftime('%B')} {value.year}"


def _ordinal_date(value: datetime) -> str:
    return (
        f"{value.day}<sup>{ordinal_suffix(value.day)}</sup> "
        f"{value.strftime('%B')} {value.year}"
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_message_time(label: str, now: Optional[datetime] = None) -> str:
    """Format a message timestamp for display next to the message.

    Messages from the same day as ``now`` show ``"HH:MM"``; older ones show
    ``"5<sup>th</sup> March 2021, 14:02"``. Unparseable labels are returned
    unchanged.
    """

    parsed = parse_date_label(label)
    if parsed is None:
        return label
    reference = now or _utc_now()
    clock = parsed.strftime("%H:%M")
    if parsed.date() == reference.date():
        return clock
    return f"{_ordinal_date(parsed)}, {clock}"


def format_relative_time(label: str, now: Optional[datetime] = None) -> str:
    """Return a short age such as ``"5m ago"``, ``"3h ago"`` or ``"2d ago"``.

    Anything a week old or more falls back to the ordinal date.
    """

    parsed = parse_date_label(label)
    if parsed is None:
        return label
    diff = (now or _utc_now()) - parsed
    if diff < HOUR:
        return f"{max(diff // MINUTE, 0)}m ago"
    if diff < DAY:
        return f"{diff // HOUR}h ago"
    if diff < WEEK:
        return f"{diff // DAY}d ago"
    return _ordinal_date(parsed)


__all__ = [
    "format_date_key",
    "format_message_time",
    "format_relative_time",
    "ordinal_suffix",
    "parse_date_label",
]
