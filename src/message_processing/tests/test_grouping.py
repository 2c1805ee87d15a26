"""
Tests for date buckets and visual message blocks.
"""

from __future__ import annotations

from datetime import timedelta

from message_processing.grouping import (
    UNKNOWN_DATE_KEY,
    build_message_blocks,
    group_messages_by_date,
    should_group_with_previous,
)
from message_processing.models import MessageKind, NormalizedMessage


def _message(
    message_id: str,
    timestamp: str,
    sender: str = "8:bob",
    kind: MessageKind = MessageKind.TEXT,
) -> NormalizedMessage:
    return NormalizedMessage(
        id=message_id,
        display_name="Bob",
        timestamp=timestamp,
        content=message_id,
        kind=kind,
        sender_id=sender,
        is_owner=False,
        original_type_tag="RichText",
    )


def test_messages_seconds_apart_are_grouped() -> None:
    """Same sender and kind within the threshold continue a block."""

    previous = _message("1", "2021-03-05T10:00:00.000Z")
    current = _message("2", "2021-03-05T10:00:01.000Z")

    assert should_group_with_previous(current, previous)
    assert not should_group_with_previous(current, None)


def test_messages_far_apart_are_not_grouped() -> None:
    """A ten minute gap starts a new block."""

    previous = _message("1", "2021-03-05T10:00:00.000Z")
    current = _message("2", "2021-03-05T10:10:00.000Z")

    assert not should_group_with_previous(current, previous)
    assert should_group_with_previous(
        current, previous, threshold=timedelta(minutes=15)
    )


def test_sender_kind_and_system_break_groups() -> None:
    """Different senders, different kinds and system messages stand alone."""

    base = _message("1", "2021-03-05T10:00:00.000Z")
    other_sender = _message("2", "2021-03-05T10:00:01.000Z", sender="8:me")
    call = _message("3", "2021-03-05T10:00:01.000Z", kind=MessageKind.CALL)
    first_system = _message("4", "2021-03-05T10:00:00.000Z", kind=MessageKind.SYSTEM)
    second_system = _message("5", "2021-03-05T10:00:01.000Z", kind=MessageKind.SYSTEM)

    assert not should_group_with_previous(other_sender, base)
    assert not should_group_with_previous(call, base)
    assert not should_group_with_previous(second_system, first_system)


def test_unparseable_timestamps_are_not_grouped() -> None:
    """Grouping requires both timestamps to parse."""

    previous = _message("1", "yesterday")
    current = _message("2", "2021-03-05T10:00:01.000Z")

    assert not should_group_with_previous(current, previous)


def test_group_messages_by_date_keeps_first_seen_order() -> None:
    """Date keys follow the order dates first appear."""

    messages = [
        _message("1", "2021-03-05T23:59:00.000Z"),
        _message("2", "2021-03-06T00:01:00.000Z"),
        _message("3", "bogus"),
        _message("4", "2021-03-06T08:00:00.000Z"),
    ]

    grouped = group_messages_by_date(messages)

    assert list(grouped) == ["5 March 2021", "6 March 2021", UNKNOWN_DATE_KEY]
    assert [m.id for m in grouped["6 March 2021"]] == ["2", "4"]
    assert group_messages_by_date([]) == {}


def test_build_message_blocks_splits_runs() -> None:
    """Blocks break at sender changes and long gaps."""

    messages = [
        _message("1", "2021-03-05T10:00:00.000Z"),
        _message("2", "2021-03-05T10:01:00.000Z"),
        _message("3", "2021-03-05T10:02:00.000Z", sender="8:me"),
        _message("4", "2021-03-05T10:30:00.000Z", sender="8:me"),
        _message("5", "2021-03-05T10:31:00.000Z", sender="8:me"),
    ]

    blocks = build_message_blocks(messages)

    assert [[m.id for m in block] for block in blocks] == [["1", "2"], ["3"], ["4", "5"]]
    assert build_message_blocks([]) == []
