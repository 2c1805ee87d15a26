"""Shared utilities for locating exports and selecting conversations."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, List, Sequence

from .chat_io import Conversation

EXPORT_FILENAME = "messages.json"
MEDIA_DIRNAME = "media"


def iter_export_files(root: Path, *, followlinks: bool = False) -> Iterator[Path]:
    """Yield ``messages.json`` files beneath ``root``.

    A file path is yielded as-is. Directories are walked and matches are
    returned in a case-insensitive sorted order so processing is
    deterministic regardless of filesystem specifics.
    """

    root_path = Path(root)
    if root_path.is_file():
        yield root_path
        return
    if not root_path.exists():
        return

    candidates: List[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root_path, followlinks=followlinks):
        for name in filenames:
            if name.lower() == EXPORT_FILENAME:
                candidates.append(Path(dirpath) / name)

    yield from sorted(candidates, key=lambda p: str(p).lower())


def default_media_dir(export_path: Path) -> Path:
    """Return the ``media`` folder Skype places beside ``messages.json``."""

    return Path(export_path).parent / MEDIA_DIRNAME


def select_conversation(conversations: Sequence[Conversation], key: str) -> Conversation:
    """Select a single conversation by id or display name.

    Matching tries, in order: exact id, case-insensitive display name, then a
    case-insensitive substring of the display name or id. The substring step
    must be unambiguous.

    Raises
    ------
    ValueError
        If no conversations are given, nothing matches, or a substring
        matches several conversations.
    """

    if not conversations:
        raise ValueError("No conversations found in export")

    needle = key.strip()
    for conversation in conversations:
        if conversation.id == needle:
            return conversation

    lower = needle.lower()
    for conversation in conversations:
        if conversation.display_name and conversation.display_name.lower() == lower:
            return conversation

    matches = [
        conversation
        for conversation in conversations
        if lower in conversation.id.lower()
        or (conversation.display_name and lower in conversation.display_name.lower())
    ]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise ValueError(
            f"Conversation {key!r} not found among {len(conversations)} conversations"
        )
    raise ValueError(
        f"Conversation {key!r} is ambiguous ({len(matches)} matches); use the id"
    )
