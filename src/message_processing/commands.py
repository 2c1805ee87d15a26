"""CLI entry point that renders a Skype export into normalized JSON.

The command loads ``messages.json``, classifies every selected conversation
and writes one JSON document holding the normalized messages, their date
buckets and visual blocks. ``--list`` prints a conversation overview instead
and ``--query`` keeps only matching messages with highlighted content.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from tqdm import tqdm

from chat import (
    Conversation,
    ExportLoadError,
    SkypeExport,
    default_media_dir,
    iter_export_files,
    load_export,
    select_conversation,
)
from utils.cli import (
    add_conversation_argument,
    add_export_input_argument,
    add_logging_arguments,
    add_media_dir_argument,
    add_output_path_argument,
    add_perspective_arguments,
    configure_logging,
)
from utils.io import dump_json, write_json

from .classifier import process_messages
from .grouping import build_message_blocks, group_messages_by_date
from .media import MediaStore, describe_media
from .preview import get_conversation_preview
from .search import find_matching_message_indices, highlight_search_match

LOGGER_NAME = "skype_render"


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``render_skype_export``."""

    parser = argparse.ArgumentParser(
        prog="render_skype_export",
        description="Normalize a Skype export into sanitized, renderable messages",
    )
    add_export_input_argument(parser)
    add_output_path_argument(
        parser, help_text="JSON file to write (default: standard output)."
    )
    add_conversation_argument(parser)
    add_perspective_arguments(parser)
    add_media_dir_argument(parser)
    parser.add_argument(
        "--query",
        "-q",
        default=None,
        help="Only keep messages matching this text and add highlighted content.",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print conversation ids, names, sizes and previews, then exit.",
    )
    add_logging_arguments(parser)
    return parser


def resolve_export_path(input_path: Path) -> Path:
    """Return the ``messages.json`` file for a file or folder argument."""

    for candidate in iter_export_files(Path(input_path).expanduser()):
        return candidate
    raise ExportLoadError(f"No messages.json found at {input_path}")


def resolve_media_store(
    media_dir: Optional[Path], export_path: Path
) -> Optional[MediaStore]:
    """Build a media store from ``media_dir`` or the export's media folder."""

    directory = media_dir or default_media_dir(export_path)
    if not Path(directory).is_dir():
        return None
    store = MediaStore.from_directory(Path(directory))
    return store if len(store) else None


def select_conversations(
    export: SkypeExport, keys: Optional[Sequence[str]]
) -> List[Conversation]:
    if not keys:
        return list(export.conversations)
    selected: List[Conversation] = []
    for key in keys:
        conversation = select_conversation(export.conversations, key)
        if all(existing.id != conversation.id for existing in selected):
            selected.append(conversation)
    return selected


def render_conversation(
    conversation: Conversation,
    *,
    viewer_id: str,
    swap_roles: bool = False,
    media_store: Optional[MediaStore] = None,
    max_messages: Optional[int] = None,
    query: Optional[str] = None,
) -> Dict[str, Any]:
    """Return the JSON payload for one conversation."""

    messages = process_messages(
        conversation.records,
        viewer_id,
        perspective_swapped=swap_roles,
        media_store=media_store,
        max_messages=max_messages or None,
    )

    if query and query.strip():
        messages = [
            messages[index] for index in find_matching_message_indices(messages, query)
        ]

    rendered: List[Dict[str, Any]] = []
    for message in messages:
        payload = message.to_dict()
        if query and query.strip():
            payload["highlighted_content"] = highlight_search_match(
                message.content, query
            )
        if media_store is not None and message.media_ref:
            payload["media"] = describe_media(media_store, message.media_ref)
        rendered.append(payload)

    # Records arrive newest first; date buckets and blocks read oldest first.
    display_order = list(reversed(messages))
    dates = [
        {"date": key, "message_ids": [message.id for message in bucket]}
        for key, bucket in group_messages_by_date(display_order).items()
    ]
    blocks = [
        [message.id for message in block]
        for block in build_message_blocks(display_order)
    ]
    return {
        "id": conversation.id,
        "display_name": conversation.display_name,
        "record_count": len(conversation.records),
        "message_count": len(messages),
        "messages": rendered,
        "dates": dates,
        "blocks": blocks,
    }


def list_conversations(export: SkypeExport, conversations: Sequence[Conversation]) -> None:
    for conversation in conversations:
        preview = get_conversation_preview(conversation.records, export.user_id)
        sys.stdout.write(
            f"{conversation.id}\t{conversation.label}\t"
            f"{len(conversation.records)}\t{preview}\n"
        )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI dispatcher; returns the process exit status."""

    args = build_parser().parse_args(argv)
    logger = configure_logging(LOGGER_NAME, verbose=args.verbose, log_file=args.log_file)
    configure_logging(
        "message_processing", verbose=args.verbose, log_file=args.log_file
    )

    try:
        export_path = resolve_export_path(args.input)
        export = load_export(export_path)
    except ExportLoadError as err:
        logger.error("[LOAD-ERROR] %s", err)
        return 1

    try:
        conversations = select_conversations(export, args.conversations)
    except ValueError as err:
        logger.error("[SELECT-ERROR] %s", err)
        return 1

    logger.info(
        "[LOADED] %s: %d conversations, user %s",
        export_path,
        len(export.conversations),
        export.user_id or "<unknown>",
    )

    if args.list:
        list_conversations(export, conversations)
        return 0

    media_store = resolve_media_store(args.media_dir, export_path)
    if media_store is None:
        logger.info("[NO-MEDIA] media shares will be rendered as file descriptions")

    rendered: List[Dict[str, Any]] = []
    for conversation in tqdm(
        conversations, desc="Rendering conversations", unit="conv", disable=None
    ):
        payload = render_conversation(
            conversation,
            viewer_id=export.user_id,
            swap_roles=args.swap_roles,
            media_store=media_store,
            max_messages=args.max_messages,
            query=args.query,
        )
        logger.info(
            "[RENDERED] %s: %d records -> %d messages",
            conversation.label,
            payload["record_count"],
            payload["message_count"],
        )
        rendered.append(payload)

    document = {
        "meta": {
            "input": str(export_path),
            "user_id": export.user_id,
            "export_date": export.export_date,
            "swap_roles": args.swap_roles,
            "query": args.query,
            "conversation_count": len(rendered),
        },
        "conversations": rendered,
    }
    if args.output:
        write_json(args.output, document)
        logger.info("[WROTE] %s", args.output)
    else:
        dump_json(document, sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
