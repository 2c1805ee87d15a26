"""Skype export loading helpers and public exports."""

from .timestamps import (
    format_date_key,
    format_message_time,
    format_relative_time,
    parse_date_label,
)
from .chat_io import Conversation, ExportLoadError, SkypeExport, load_export
from .chat_utils import (
    default_media_dir,
    iter_export_files,
    select_conversation,
)
