"""Short plain-text previews of raw records for conversation lists."""

from __future__ import annotations

from typing import Optional, Sequence

from .models import MessageType, RawRecord
from .patterns import PREVIEW_MAX_LENGTH
from .sanitizer import plain_text
from .system_events import (
    NOTICE_FALLBACK,
    POP_CARD_FALLBACK,
    parse_call_event,
    parse_generic_file,
    parse_media_file_info,
    parse_notice,
    parse_pop_card,
    parse_thread_activity,
)
from .translation import parse_translation_content

DEFAULT_PREVIEW = "Message"
SYSTEM_PREVIEW = "System message"


def get_preview_text(content: str, limit: int = PREVIEW_MAX_LENGTH) -> str:
    return plain_text(content)[:limit]


def get_message_preview(
    record: RawRecord,
    viewer_id: str,
    next_record: Optional[RawRecord] = None,
) -> str:
    """Return a one-line preview of ``record`` as the viewer would see it.

    Routing mirrors the classifier. Call events are described from the
    viewer's own (unswapped) perspective.
    """

    message_type = record.message_type
    content = record.raw_content or ""

    if message_type is MessageType.TRANSLATION:
        if (
            record.sender_id == viewer_id
            and next_record is not None
            and next_record.message_type is MessageType.RICH_TEXT
        ):
            return get_preview_text(next_record.raw_content)
        return get_preview_text(parse_translation_content(content) or content)

    if message_type in (MessageType.RICH_TEXT, MessageType.INVITE_FREE_RELATIONSHIP):
        return get_preview_text(content)

    if message_type is MessageType.GENERIC_FILE:
        return parse_generic_file(content)

    if message_type in (MessageType.URI_OBJECT, MessageType.MEDIA_VIDEO):
        if "<OriginalName" in content:
            return parse_media_file_info(content)
        return get_preview_text(content)

    if message_type is MessageType.THREAD_ACTIVITY:
        return parse_thread_activity(record.type_tag, content) or SYSTEM_PREVIEW

    if message_type is MessageType.CALL_EVENT:
        return parse_call_event(content, viewer_id, False)

    if message_type is MessageType.NOTICE:
        return parse_notice(content) or NOTICE_FALLBACK

    if message_type is MessageType.POP_CARD:
        return parse_pop_card(content) or POP_CARD_FALLBACK

    return DEFAULT_PREVIEW


def get_conversation_preview(records: Sequence[RawRecord], viewer_id: str) -> str:
    """Preview the last record of the export list that has visible text.

    Album markers and records already covered by a translation pair are
    skipped. An empty conversation previews as ``""``.
    """

    for index in range(len(records) - 1, -1, -1):
        record = records[index]
        if record.message_type is MessageType.MEDIA_ALBUM:
            continue
        previous = records[index - 1] if index > 0 else None
        if (
            record.message_type is MessageType.RICH_TEXT
            and previous is not None
            and previous.message_type is MessageType.TRANSLATION
        ):
            continue
        next_record = records[index + 1] if index + 1 < len(records) else None
        preview = get_message_preview(record, viewer_id, next_record)
        if preview.strip():
            return preview
    return ""


__all__ = [
    "DEFAULT_PREVIEW",
    "SYSTEM_PREVIEW",
    "get_conversation_preview",
    "get_message_preview",
    "get_preview_text",
]
