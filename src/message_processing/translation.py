"""Resolution of Skype ``Translation`` records and their paired originals.

Skype writes a ``Translation`` record followed by a ``RichText`` record that
repeats the message in the sender's language. Which half is shown depends on
who is reading:

- for the viewer's own messages the original ``RichText`` is shown and the
  translation metadata is hidden;
- for everyone else the translated text is shown and the following
  ``RichText`` is suppressed through the pass skip set.

When no ``RichText`` follows (end of the list or a reordered export), nothing
is skipped and the translated text path is used.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from .display_names import clean_display_name
from .models import MessageKind, MessageType, NormalizedMessage, RawRecord, ViewContext
from .sanitizer import parse_message_content

LOGGER = logging.getLogger(__name__)


def parse_translation_content(content: str) -> Optional[str]:
    """Return the first ``translations[].translation`` value, or ``None``."""

    try:
        data = json.loads(content)
    except (TypeError, ValueError) as err:
        LOGGER.warning(
            "Failed to parse translation content (length=%d): %s",
            len(content or ""),
            err,
        )
        return None

    if not isinstance(data, dict):
        return None
    translations = data.get("translations")
    if not isinstance(translations, list) or not translations:
        return None
    first = translations[0]
    if not isinstance(first, dict):
        return None
    translation = first.get("translation")
    if isinstance(translation, str) and translation:
        return translation
    return None


def _is_rich_text(record: Optional[RawRecord]) -> bool:
    return record is not None and record.message_type is MessageType.RICH_TEXT


def handle_translation(
    message: RawRecord,
    next_record: Optional[RawRecord],
    context: ViewContext,
) -> NormalizedMessage:
    """Resolve a ``Translation`` record against the record that follows it."""

    is_owner = context.is_owner(message.sender_id)

    if message.sender_id == context.viewer_id and _is_rich_text(next_record):
        context.skip_ids.add(next_record.id)
        return NormalizedMessage(
            id=next_record.id,
            display_name=clean_display_name(next_record.display_name),
            timestamp=next_record.arrival_timestamp,
            content=parse_message_content(next_record.raw_content),
            kind=MessageKind.TEXT,
            sender_id=message.sender_id,
            is_owner=is_owner,
            original_type_tag=next_record.type_tag,
        )

    translated = parse_translation_content(message.raw_content)
    content = translated or message.raw_content

    if _is_rich_text(next_record):
        context.skip_ids.add(next_record.id)

    return NormalizedMessage(
        id=message.id,
        display_name=clean_display_name(message.display_name),
        timestamp=message.arrival_timestamp,
        content=parse_message_content(content),
        kind=MessageKind.TEXT,
        sender_id=message.sender_id,
        is_owner=is_owner,
        original_type_tag=message.type_tag,
    )
