"""Parsers for Skype system, call, notice and file-share records.

Each parser takes the raw record content and returns display text. Thread
activity parsers return ``None`` when the record carries nothing worth
showing; the classifier drops those records. JSON-bearing payloads never
raise: any decoding problem falls back to a fixed string.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional

from .display_names import clean_display_name
from .patterns import (
    CALL_DURATION_PATTERN,
    CALL_NAME_PATTERN,
    CALL_PART_PATTERN,
    CALL_TYPE_PATTERN,
    FILE_SIZE_PATTERN,
    ORIGINAL_NAME_PATTERN,
    THREAD_TARGET_PATTERN,
    THREAD_VALUE_PATTERN,
    URI_OBJECT_TYPE_PATTERN,
    VIDEO_FILENAME_PATTERN,
)

LOGGER = logging.getLogger(__name__)

ADD_MEMBER = "ThreadActivity/AddMember"
HISTORY_DISCLOSED_UPDATE = "ThreadActivity/HistoryDisclosedUpdate"
JOINING_ENABLED_UPDATE = "ThreadActivity/JoiningEnabledUpdate"

THREAD_VALUE_MESSAGES = {
    HISTORY_DISCLOSED_UPDATE: (
        "Chat history is now visible",
        "Chat history is now hidden",
    ),
    JOINING_ENABLED_UPDATE: (
        "Anyone can join this conversation",
        "Joining this conversation is restricted",
    ),
}

CALL_SEPARATOR = " • "
UNKNOWN_PARTICIPANT = "Unknown participant"
VIEWER_LABEL = "You"
NOTICE_FALLBACK = "System Notice"
POP_CARD_FALLBACK = "System Message"
UNKNOWN_FILE = "Unknown file"
FILE_ICON = "\U0001F4CE"
VIDEO_ICON = "\U0001F4F9"
IMAGE_ICON = "\U0001F4F7"


# --- Thread activity ----------------------------------------------


def parse_thread_activity(type_tag: str, content: str) -> Optional[str]:
    """Return the sentence for a ``ThreadActivity/*`` record, or ``None``."""

    content = content or ""
    if type_tag == ADD_MEMBER:
        members: List[str] = []
        for target in THREAD_TARGET_PATTERN.findall(content):
            member = target.rsplit(":", 1)[-1].strip()
            if member and member not in members:
                members.append(member)
        if not members:
            return None
        return f"Added {', '.join(members)} to the conversation"

    messages = THREAD_VALUE_MESSAGES.get(type_tag)
    if messages is None:
        return None
    value_match = THREAD_VALUE_PATTERN.search(content)
    if not value_match:
        return None
    enabled = value_match.group(1).strip().lower() == "true"
    return messages[0] if enabled else messages[1]


# --- Calls --------------------------------------------------------


@dataclass(frozen=True)
class CallParticipant:
    """One de-duplicated participant of a call event."""

    identity: str
    label: str

    @property
    def identity_key(self) -> str:
        return self.identity.lower()

    @property
    def clean_identity_key(self) -> str:
        cleaned = clean_display_name(self.identity)
        return (cleaned or self.identity).lower()


@dataclass(frozen=True)
class CallDetails:
    outcome: Optional[str]
    participants: List[CallParticipant]
    duration_seconds: Optional[float]


def format_call_duration(seconds: float) -> str:
    """Format call length as ``"2m 5s"`` or ``"42s"``."""

    minutes = int(seconds // 60)
    remaining = int(math.floor(seconds % 60))
    if minutes > 0:
        return f"{minutes}m {remaining}s"
    return f"{remaining}s"


def resolve_participant_label(name: Optional[str], identity: str) -> str:
    """Pick the best label for a call participant."""

    trimmed = name.strip() if name else ""
    return (
        clean_display_name(trimmed)
        or clean_display_name(identity)
        or trimmed
        or identity
        or UNKNOWN_PARTICIPANT
    )


def extract_call_details(content: str) -> CallDetails:
    """Collect outcome, participants and longest duration from call markup."""

    content = content or ""
    type_match = CALL_TYPE_PATTERN.search(content)
    outcome = type_match.group(1).lower() if type_match else None

    participants: List[CallParticipant] = []
    seen: set[str] = set()
    max_duration = 0.0
    for part_match in CALL_PART_PATTERN.finditer(content):
        identity = part_match.group(1) or ""
        body = part_match.group(2) or ""
        key = identity.lower()
        if key not in seen:
            seen.add(key)
            name_match = CALL_NAME_PATTERN.search(body)
            name = name_match.group(1) if name_match else ""
            participants.append(
                CallParticipant(
                    identity=identity,
                    label=resolve_participant_label(name, identity),
                )
            )

        duration_match = CALL_DURATION_PATTERN.search(body)
        if duration_match:
            try:
                seconds = float(duration_match.group(1))
            except ValueError:
                continue
            if math.isfinite(seconds):
                max_duration = max(max_duration, seconds)

    return CallDetails(
        outcome=outcome,
        participants=participants,
        duration_seconds=max_duration if max_duration > 0 else None,
    )


def _participant_labels(
    participants: List[CallParticipant], viewer_id: str, perspective_swapped: bool
) -> List[str]:
    viewer_key = viewer_id.lower()
    viewer_clean_key = (clean_display_name(viewer_id) or viewer_id).lower()

    # Swapped perspective: the first participant who is not the viewer reads
    # the conversation, so they become "You".
    if perspective_swapped:
        for participant in participants:
            if (
                participant.identity_key != viewer_key
                and participant.clean_identity_key != viewer_clean_key
            ):
                viewer_key = participant.identity_key
                viewer_clean_key = participant.clean_identity_key
                break

    labels = []
    for participant in participants:
        is_viewer = (
            participant.identity_key == viewer_key
            or participant.clean_identity_key == viewer_clean_key
        )
        labels.append(VIEWER_LABEL if is_viewer else participant.label)
    return labels


def parse_call_event(
    content: str, viewer_id: str, perspective_swapped: bool = False
) -> str:
    """Describe an ``Event/Call*`` record, e.g. ``"Call ended • 42s • You, bob"``."""

    details = extract_call_details(content)
    labels = _participant_labels(details.participants, viewer_id, perspective_swapped)
    names = ", ".join(labels)
    duration = (
        format_call_duration(details.duration_seconds)
        if details.duration_seconds is not None
        else ""
    )

    if details.outcome is None:
        head = "Call event"
    elif details.outcome == "started":
        head = "Call started"
    elif details.outcome == "missed":
        head = "Missed call"
    elif details.outcome == "ended":
        head = "Call ended"
    else:
        head = f"Call {details.outcome}"

    segments = [head]
    if details.outcome == "ended" and duration:
        segments.append(duration)
    if names:
        segments.append(names)
    return CALL_SEPARATOR.join(segments)


# --- Notices ------------------------------------------------------


def _first_dict(value: Any) -> Optional[dict]:
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return None


def _title_and_text(card: Any, fallback: str) -> str:
    if not isinstance(card, dict):
        return fallback
    title = card.get("title")
    text = card.get("text")
    title = title if isinstance(title, str) and title else None
    text = text if isinstance(text, str) and text else None
    if title and text:
        return f"{title}: {text}"
    return title or text or fallback


def parse_notice(content: str) -> str:
    """Return ``"title: text"`` from a ``Notice`` JSON payload."""

    try:
        data = json.loads(content)
    except (TypeError, ValueError) as err:
        LOGGER.warning("Failed to parse notice payload: %s", err)
        return NOTICE_FALLBACK

    first = _first_dict(data)
    attachment = _first_dict(first.get("attachments")) if first else None
    card = attachment.get("content") if attachment else None
    return _title_and_text(card, NOTICE_FALLBACK)


def parse_pop_card(content: str) -> str:
    """Return ``"title: text"`` from a ``PopCard`` JSON payload."""

    try:
        data = json.loads(content)
    except (TypeError, ValueError) as err:
        LOGGER.warning("Failed to parse pop card payload: %s", err)
        return POP_CARD_FALLBACK

    first = _first_dict(data)
    card = first.get("content") if first else None
    return _title_and_text(card, POP_CARD_FALLBACK)


# --- Files --------------------------------------------------------


def format_file_size(size_bytes: int) -> str:
    """Format a byte count as ``"1.5 MB"`` or ``"12.0 KB"``."""

    size_kb = size_bytes / 1024
    size_mb = size_kb / 1024
    if size_mb >= 1:
        return f"{size_mb:.1f} MB"
    return f"{size_kb:.1f} KB"


def _file_label(icon: str, content: str) -> str:
    name_match = ORIGINAL_NAME_PATTERN.search(content or "")
    size_match = FILE_SIZE_PATTERN.search(content or "")
    filename = name_match.group(1) if name_match else UNKNOWN_FILE
    if size_match:
        return f"{icon} <em>{filename}</em> ({format_file_size(int(size_match.group(1)))})"
    return f"{icon} <em>{filename}</em>"


def parse_generic_file(content: str) -> str:
    """Describe a ``RichText/Media_GenericFile`` share by name and size."""

    return _file_label(FILE_ICON, content)


def is_video_media(content: str) -> bool:
    """Return True when URIObject markup describes a video."""

    type_match = URI_OBJECT_TYPE_PATTERN.search(content or "")
    media_type = type_match.group(1).lower() if type_match else ""
    if media_type.startswith("video"):
        return True
    name_match = ORIGINAL_NAME_PATTERN.search(content or "")
    return bool(name_match and VIDEO_FILENAME_PATTERN.search(name_match.group(1)))


def parse_media_file_info(content: str) -> str:
    """Describe an image or video share whose file is not available."""

    icon = VIDEO_ICON if is_video_media(content) else IMAGE_ICON
    return _file_label(icon, content)


__all__ = [
    "CallDetails",
    "CallParticipant",
    "extract_call_details",
    "format_call_duration",
    "format_file_size",
    "is_video_media",
    "parse_call_event",
    "parse_generic_file",
    "parse_media_file_info",
    "parse_notice",
    "parse_pop_card",
    "parse_thread_activity",
    "resolve_participant_label",
]
