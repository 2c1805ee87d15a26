"""Record and message types shared by the Skype message processing pipeline.

Raw export entries are represented by :class:`RawRecord`; the classifier turns
each one into at most one :class:`NormalizedMessage`. :class:`ViewContext`
carries the per-pass viewer state, including the transient skip set used by
translation pairing.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Set

if TYPE_CHECKING:
    from .media import MediaStore


class MessageKind(str, Enum):
    """Render category of a normalized message."""

    TEXT = "text"
    SYSTEM = "system"
    CALL = "call"
    NOTICE = "notice"
    MEDIA = "media"


class MessageType(Enum):
    """Known Skype ``messagetype`` tags plus an ``UNKNOWN`` fallback.

    Exact tags map one-to-one. ``THREAD_ACTIVITY``, ``CALL_EVENT`` and
    ``INVITE_FREE_RELATIONSHIP`` cover whole tag families that share a prefix.
    """

    RICH_TEXT = "RichText"
    MEDIA_ALBUM = "RichText/Media_Album"
    URI_OBJECT = "RichText/UriObject"
    MEDIA_VIDEO = "RichText/Media_Video"
    GENERIC_FILE = "RichText/Media_GenericFile"
    TRANSLATION = "Translation"
    NOTICE = "Notice"
    POP_CARD = "PopCard"
    TEXT = "Text"
    THREAD_ACTIVITY = "ThreadActivity"
    CALL_EVENT = "Event/Call"
    INVITE_FREE_RELATIONSHIP = "InviteFreeRelationshipChanged"
    UNKNOWN = ""

    @classmethod
    def from_tag(cls, tag: Optional[str]) -> "MessageType":
        """Return the variant for a raw tag; matching is case-sensitive."""

        if not tag:
            return cls.UNKNOWN
        for member in _EXACT_TYPES:
            if tag == member.value:
                return member
        for member in _PREFIX_TYPES:
            if tag.startswith(member.value):
                return member
        return cls.UNKNOWN


_EXACT_TYPES = (
    MessageType.RICH_TEXT,
    MessageType.MEDIA_ALBUM,
    MessageType.URI_OBJECT,
    MessageType.MEDIA_VIDEO,
    MessageType.GENERIC_FILE,
    MessageType.TRANSLATION,
    MessageType.NOTICE,
    MessageType.POP_CARD,
    MessageType.TEXT,
)
_PREFIX_TYPES = (
    MessageType.THREAD_ACTIVITY,
    MessageType.CALL_EVENT,
    MessageType.INVITE_FREE_RELATIONSHIP,
)


@dataclass(frozen=True)
class RawRecord:
    """One raw export entry before normalization.

    Parameters
    ----------
    id:
        Export message identifier, unique within a conversation.
    sender_id:
        Skype identity of the sender such as ``"8:live:alice"``.
    arrival_timestamp:
        ISO 8601 arrival time label as exported.
    type_tag:
        Raw ``messagetype`` string; an open set.
    raw_content:
        Message body exactly as exported (markup, JSON or plain text).
    conversation_id:
        Identifier of the owning conversation.
    display_name:
        Optional sender display name carried by the export.
    properties:
        Optional free-form property bag.
    version:
        Optional export version number.
    """

    id: str
    sender_id: str
    arrival_timestamp: str
    type_tag: str
    raw_content: str
    conversation_id: str = ""
    display_name: Optional[str] = None
    properties: Optional[Dict[str, Any]] = field(default=None, compare=False)
    version: Optional[int] = None

    @property
    def message_type(self) -> MessageType:
        return MessageType.from_tag(self.type_tag)


@dataclass
class ViewContext:
    """Per-pass viewer state threaded through the classifier.

    ``skip_ids`` is written by translation pairing and read by later records
    of the same pass. A new context must be created for every pass.
    """

    viewer_id: str
    perspective_swapped: bool = False
    skip_ids: Set[str] = field(default_factory=set)
    media_store: Optional["MediaStore"] = None

    def is_owner(self, sender_id: str) -> bool:
        return (sender_id == self.viewer_id) != self.perspective_swapped


@dataclass(frozen=True)
class NormalizedMessage:
    """Sanitized, classified, render-ready message."""

    id: str
    display_name: Optional[str]
    timestamp: str
    content: str
    kind: MessageKind
    sender_id: str
    is_owner: bool
    original_type_tag: str
    media_ref: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable mapping of this message."""

        payload = asdict(self)
        payload["kind"] = self.kind.value
        return payload


__all__ = [
    "MessageKind",
    "MessageType",
    "NormalizedMessage",
    "RawRecord",
    "ViewContext",
]
