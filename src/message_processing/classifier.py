"""Classification of raw Skype export records into normalized messages.

The classifier walks one conversation's records in order, consulting the
next record where a type needs lookahead (translations), and dispatches each
record on its :class:`~message_processing.models.MessageType` through
:data:`MESSAGE_HANDLERS`. Every record yields zero or one message and output
order follows input order.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from .display_names import clean_display_name
from .media import MediaStore, extract_media_id
from .models import MessageKind, MessageType, NormalizedMessage, RawRecord, ViewContext
from .sanitizer import parse_message_content, sanitize_html
from .system_events import (
    parse_call_event,
    parse_generic_file,
    parse_media_file_info,
    parse_notice,
    parse_pop_card,
    parse_thread_activity,
)
from .translation import handle_translation

LOGGER = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 500

Handler = Callable[
    [RawRecord, Optional[RawRecord], ViewContext], Optional[NormalizedMessage]
]


def create_base_message(
    record: RawRecord,
    context: ViewContext,
    content: str,
    kind: MessageKind,
    *,
    media_ref: Optional[str] = None,
) -> NormalizedMessage:
    """Build a message attributed to ``record`` from the viewer's perspective."""

    return NormalizedMessage(
        id=record.id,
        display_name=clean_display_name(record.display_name),
        timestamp=record.arrival_timestamp,
        content=content,
        kind=kind,
        sender_id=record.sender_id,
        is_owner=context.is_owner(record.sender_id),
        original_type_tag=record.type_tag,
        media_ref=media_ref,
    )


def create_system_message(
    record: RawRecord, content: str, kind: MessageKind
) -> NormalizedMessage:
    """Build a message with no sender attribution."""

    return NormalizedMessage(
        id=record.id,
        display_name=None,
        timestamp=record.arrival_timestamp,
        content=content,
        kind=kind,
        sender_id=record.sender_id,
        is_owner=False,
        original_type_tag=record.type_tag,
    )


def _drop(record, next_record, context) -> None:
    return None


def _handle_translation(record, next_record, context) -> NormalizedMessage:
    return handle_translation(record, next_record, context)


def _handle_media(record, next_record, context) -> NormalizedMessage:
    media_id = extract_media_id(record.raw_content)
    store = context.media_store
    if media_id and store is not None and store.primary_asset(media_id) is not None:
        return create_base_message(
            record,
            context,
            parse_message_content(record.raw_content),
            MessageKind.MEDIA,
            media_ref=media_id,
        )
    return create_base_message(
        record,
        context,
        sanitize_html(parse_media_file_info(record.raw_content)),
        MessageKind.TEXT,
    )


def _handle_generic_file(record, next_record, context) -> NormalizedMessage:
    return create_base_message(
        record,
        context,
        sanitize_html(parse_generic_file(record.raw_content)),
        MessageKind.TEXT,
    )


def _handle_rich_text(record, next_record, context) -> NormalizedMessage:
    return create_base_message(
        record, context, parse_message_content(record.raw_content), MessageKind.TEXT
    )


def _handle_thread_activity(record, next_record, context) -> Optional[NormalizedMessage]:
    text = parse_thread_activity(record.type_tag, record.raw_content)
    if not text:
        return None
    return create_system_message(record, sanitize_html(text), MessageKind.SYSTEM)


def _handle_call(record, next_record, context) -> NormalizedMessage:
    text = parse_call_event(
        record.raw_content, context.viewer_id, context.perspective_swapped
    )
    return create_base_message(record, context, sanitize_html(text), MessageKind.CALL)


def _handle_notice(record, next_record, context) -> NormalizedMessage:
    return create_system_message(
        record, sanitize_html(parse_notice(record.raw_content)), MessageKind.NOTICE
    )


def _handle_pop_card(record, next_record, context) -> NormalizedMessage:
    return create_system_message(
        record, sanitize_html(parse_pop_card(record.raw_content)), MessageKind.NOTICE
    )


def _handle_relationship_change(record, next_record, context) -> NormalizedMessage:
    return create_system_message(
        record, parse_message_content(record.raw_content), MessageKind.SYSTEM
    )


def _handle_plain_text(record, next_record, context) -> NormalizedMessage:
    # Legacy plain-text records are shown as exported.
    return create_base_message(record, context, record.raw_content, MessageKind.TEXT)


def _handle_unknown(record, next_record, context) -> NormalizedMessage:
    LOGGER.debug(
        "Processing unknown message type as text: id=%s type=%r conversation=%s "
        "from=%s length=%d",
        record.id,
        record.type_tag,
        record.conversation_id,
        record.sender_id,
        len(record.raw_content or ""),
    )
    return _handle_rich_text(record, next_record, context)


MESSAGE_HANDLERS: Dict[MessageType, Handler] = {
    MessageType.MEDIA_ALBUM: _drop,
    MessageType.TRANSLATION: _handle_translation,
    MessageType.URI_OBJECT: _handle_media,
    MessageType.MEDIA_VIDEO: _handle_media,
    MessageType.GENERIC_FILE: _handle_generic_file,
    MessageType.RICH_TEXT: _handle_rich_text,
    MessageType.THREAD_ACTIVITY: _handle_thread_activity,
    MessageType.CALL_EVENT: _handle_call,
    MessageType.NOTICE: _handle_notice,
    MessageType.POP_CARD: _handle_pop_card,
    MessageType.INVITE_FREE_RELATIONSHIP: _handle_relationship_change,
    MessageType.TEXT: _handle_plain_text,
    MessageType.UNKNOWN: _handle_unknown,
}


def process_message(
    record: RawRecord,
    next_record: Optional[RawRecord],
    context: ViewContext,
) -> Optional[NormalizedMessage]:
    """Classify one record; ``None`` means the record is not shown."""

    if record.id in context.skip_ids:
        return None
    handler = MESSAGE_HANDLERS.get(record.message_type, _handle_unknown)
    return handler(record, next_record, context)


def _window(records: Sequence[RawRecord], max_messages: Optional[int]) -> int:
    if max_messages:
        return min(max_messages, len(records))
    return len(records)


def iter_message_chunks(
    records: Sequence[RawRecord],
    context: ViewContext,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_messages: Optional[int] = None,
) -> Iterator[List[NormalizedMessage]]:
    """Classify ``records`` in chunks, yielding each chunk's messages.

    The caller resumes the generator to continue the pass or abandons it to
    stop. Lookahead crosses chunk boundaries, so the concatenated output is
    the same for every ``chunk_size``.
    """

    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    end_index = _window(records, max_messages)
    for start in range(0, end_index, chunk_size):
        chunk: List[NormalizedMessage] = []
        for index in range(start, min(start + chunk_size, end_index)):
            record = records[index]
            next_record = records[index + 1] if index + 1 < len(records) else None
            processed = process_message(record, next_record, context)
            if processed is not None:
                chunk.append(processed)
        yield chunk


def process_messages(
    records: Sequence[RawRecord],
    viewer_id: str,
    perspective_swapped: bool = False,
    media_store: Optional[MediaStore] = None,
    max_messages: Optional[int] = None,
) -> List[NormalizedMessage]:
    """Classify one conversation's records for display.

    Parameters
    ----------
    records:
        Raw records of a single conversation in export order (newest first),
        so a translation is followed by its original.
    viewer_id:
        Identity of the exporting user; decides ownership and "You" labels.
    perspective_swapped:
        When ``True``, show the conversation as the counterpart would see it.
    media_store:
        Optional store of exported media; without it media shares render as
        file descriptions.
    max_messages:
        Optional limit on the number of records considered.

    Returns
    -------
    List[NormalizedMessage]
        Messages in input order; never longer than the considered records.
    """

    context = ViewContext(
        viewer_id=viewer_id,
        perspective_swapped=perspective_swapped,
        media_store=media_store,
    )
    processed: List[NormalizedMessage] = []
    for chunk in iter_message_chunks(records, context, max_messages=max_messages):
        processed.extend(chunk)

    LOGGER.debug(
        "Processed %d of %d records into %d messages (skipped %d)",
        _window(records, max_messages),
        len(records),
        len(processed),
        len(context.skip_ids),
    )
    return processed


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "MESSAGE_HANDLERS",
    "create_base_message",
    "create_system_message",
    "iter_message_chunks",
    "process_message",
    "process_messages",
]
