"""Classification and sanitization of Skype export records.

Submodules
----------
models
    Raw record, view context and normalized message types.
classifier
    Per-record dispatch and whole-pass processing.
translation
    Translation record pairing.
sanitizer
    Markup rewrite table and allow-list HTML filter.
system_events
    Thread activity, call, notice and file-share parsers.
media
    Media id extraction and exported media lookup.
grouping
    Date buckets and visual message blocks.
search
    Message search, highlighting and match navigation.
preview
    Conversation list previews.
commands
    ``render_skype_export`` command line entry point.
"""

from __future__ import annotations

from .models import MessageKind, MessageType, NormalizedMessage, RawRecord, ViewContext
from .classifier import iter_message_chunks, process_message, process_messages
from .grouping import (
    build_message_blocks,
    group_messages_by_date,
    should_group_with_previous,
)
from .media import MediaStore, extract_media_id
from .sanitizer import parse_message_content, sanitize_html, strip_html
from .search import (
    SearchNavigator,
    filter_messages,
    find_matching_message_indices,
    highlight_search_match,
)

__all__ = [
    "MediaStore",
    "MessageKind",
    "MessageType",
    "NormalizedMessage",
    "RawRecord",
    "SearchNavigator",
    "ViewContext",
    "build_message_blocks",
    "extract_media_id",
    "filter_messages",
    "find_matching_message_indices",
    "group_messages_by_date",
    "highlight_search_match",
    "iter_message_chunks",
    "parse_message_content",
    "process_message",
    "process_messages",
    "sanitize_html",
    "should_group_with_previous",
    "strip_html",
]
