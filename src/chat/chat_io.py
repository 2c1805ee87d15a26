"""Helpers to load a Skype ``messages.json`` export into record objects."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Dict, List, Optional

import json_repair

from message_processing.models import RawRecord

LOGGER = logging.getLogger(__name__)


class ExportLoadError(Exception):
    """Raised when an export file cannot be read or is not a Skype export."""


@dataclass
class Conversation:
    """One conversation of an export with its raw records."""

    id: str
    display_name: Optional[str]
    records: List[RawRecord]
    properties: Dict[str, Any] = field(default_factory=dict)
    thread_properties: Optional[Dict[str, Any]] = None

    @property
    def label(self) -> str:
        return self.display_name or self.id


@dataclass
class SkypeExport:
    """In-memory representation of a whole Skype export."""

    user_id: str
    export_date: Optional[str]
    conversations: List[Conversation]

    def get(self, conversation_id: str) -> Optional[Conversation]:
        for conversation in self.conversations:
            if conversation.id == conversation_id:
                return conversation
        return None


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def _optional_text(value: object) -> Optional[str]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def _record_from_entry(entry: Dict[str, Any], conversation_id: str) -> RawRecord:
    version = entry.get("version")
    properties = entry.get("properties")
    return RawRecord(
        id=_as_text(entry.get("id")),
        sender_id=_as_text(entry.get("from")),
        arrival_timestamp=_as_text(entry.get("originalarrivaltime")),
        type_tag=_as_text(entry.get("messagetype")),
        raw_content=_as_text(entry.get("content")),
        conversation_id=_as_text(entry.get("conversationid")) or conversation_id,
        display_name=_optional_text(entry.get("displayName")),
        properties=properties if isinstance(properties, dict) else None,
        version=version if isinstance(version, int) else None,
    )


def conversation_from_dict(data: Dict[str, Any]) -> Conversation:
    """Build a :class:`Conversation` from one ``conversations[]`` entry.

    Records keep the export order, which Skype writes newest first.
    """

    conversation_id = _as_text(data.get("id"))
    raw_messages = data.get("MessageList")
    records: List[RawRecord] = []
    if isinstance(raw_messages, list):
        for entry in raw_messages:
            if not isinstance(entry, dict):
                continue
            records.append(_record_from_entry(entry, conversation_id))

    properties = data.get("properties")
    thread_properties = data.get("threadProperties")
    return Conversation(
        id=conversation_id,
        display_name=_optional_text(data.get("displayName")),
        records=records,
        properties=properties if isinstance(properties, dict) else {},
        thread_properties=(
            thread_properties if isinstance(thread_properties, dict) else None
        ),
    )


def load_export(path: Path) -> SkypeExport:
    """Load a Skype ``messages.json`` export.

    Parameters
    ----------
    path:
        Path to the export JSON file.

    Returns
    -------
    SkypeExport
        Conversations whose records keep the export order (newest first).
        Translation pairing looks ahead in that order, so callers reverse
        only for display.

    Raises
    ------
    ExportLoadError
        If the file cannot be read or does not decode to an export object.
    """

    try:
        raw = Path(path).read_text(encoding="utf-8-sig")
    except OSError as err:
        raise ExportLoadError(f"Failed to read {path}: {err}") from err
    try:
        data = json_repair.loads(raw)
    except (JSONDecodeError, ValueError) as err:
        raise ExportLoadError(f"Invalid JSON {path}: {err}") from err

    if not isinstance(data, dict) or not isinstance(data.get("conversations"), list):
        raise ExportLoadError(f"{path} is not a Skype export (no conversations list)")

    conversations: List[Conversation] = []
    for entry in data["conversations"]:
        if not isinstance(entry, dict):
            LOGGER.warning("Skipping malformed conversation entry in %s", path)
            continue
        conversations.append(conversation_from_dict(entry))

    return SkypeExport(
        user_id=_as_text(data.get("userId")),
        export_date=_optional_text(data.get("exportDate")),
        conversations=conversations,
    )
