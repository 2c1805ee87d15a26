"""Date bucketing and visual grouping of normalized messages."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from chat.timestamps import format_date_key, parse_date_label

from .models import MessageKind, NormalizedMessage

GROUP_TIME_THRESHOLD = timedelta(minutes=5)
UNKNOWN_DATE_KEY = "Unknown date"


def _parse(message: NormalizedMessage) -> Optional[datetime]:
    return parse_date_label(message.timestamp)


def group_messages_by_date(
    messages: Sequence[NormalizedMessage],
) -> Dict[str, List[NormalizedMessage]]:
    """Bucket messages by calendar date such as ``"5 March 2021"``.

    Keys keep the order in which each date is first seen. Messages whose
    timestamp cannot be parsed share the :data:`UNKNOWN_DATE_KEY` bucket.
    """

    grouped: Dict[str, List[NormalizedMessage]] = {}
    for message in messages:
        parsed = _parse(message)
        key = format_date_key(parsed) if parsed is not None else UNKNOWN_DATE_KEY
        grouped.setdefault(key, []).append(message)
    return grouped


def should_group_with_previous(
    current: NormalizedMessage,
    previous: Optional[NormalizedMessage],
    threshold: timedelta = GROUP_TIME_THRESHOLD,
) -> bool:
    """Return True when ``current`` continues the block started by ``previous``.

    Grouped messages share a sender, a kind and arrive within ``threshold``
    of each other. System messages always stand alone.
    """

    if previous is None:
        return False
    if current.sender_id != previous.sender_id or current.kind != previous.kind:
        return False
    if current.kind is MessageKind.SYSTEM or previous.kind is MessageKind.SYSTEM:
        return False

    current_time = _parse(current)
    previous_time = _parse(previous)
    if current_time is None or previous_time is None:
        return False
    return abs(current_time - previous_time) < threshold


def build_message_blocks(
    messages: Sequence[NormalizedMessage],
    threshold: timedelta = GROUP_TIME_THRESHOLD,
) -> List[List[NormalizedMessage]]:
    """Split ``messages`` into runs that render as one visual block."""

    blocks: List[List[NormalizedMessage]] = []
    previous: Optional[NormalizedMessage] = None
    for message in messages:
        if blocks and should_group_with_previous(message, previous, threshold):
            blocks[-1].append(message)
        else:
            blocks.append([message])
        previous = message
    return blocks


__all__ = [
    "GROUP_TIME_THRESHOLD",
    "UNKNOWN_DATE_KEY",
    "build_message_blocks",
    "group_messages_by_date",
    "should_group_with_previous",
]
