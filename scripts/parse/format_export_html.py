"""
Render conversations of a Skype export as standalone HTML documents, one
output file per conversation.

Input: a Skype ``messages.json`` export (or a folder containing one).

Output: ``OUTPUT_DIR/<conversation>.html`` with date separators, grouped
message blocks and sanitized message bodies. Owner messages are aligned
right; system, call and notice rows are centered.

Usage:
  python scripts/parse/format_export_html.py EXPORT OUTPUT_DIR \
      --conversation "Alice" --swap-roles --query "dinner"

Notes:
  - Message bodies are already sanitized by the classifier; names, labels and
    legacy plain-text bodies are escaped here.
  - Media found in the export's media folder (or --media-dir) is embedded;
    other shares are rendered as file descriptions.
"""

from __future__ import annotations

import argparse
import html
import sys
from pathlib import Path
from typing import List, Optional

from chat import (
    Conversation,
    ExportLoadError,
    format_message_time,
    load_export,
    select_conversation,
)
from message_processing import (
    MessageKind,
    NormalizedMessage,
    build_message_blocks,
    group_messages_by_date,
    highlight_search_match,
    process_messages,
)
from message_processing.commands import resolve_export_path, resolve_media_store
from message_processing.media import MediaStore
from utils.cli import add_media_dir_argument
from utils.io import slugify

_CSS = (
    "body { font-family: -apple-system, BlinkMacSystemFont, Segoe UI, Roboto, "
    "Helvetica, Arial, sans-serif; line-height: 1.45; color: #111; "
    "max-width: 760px; margin: 0 auto; }\n"
    ".date { text-align: center; color: #666; margin: 1.5em 0 0.5em; }\n"
    ".block { margin: 0.6em 0; }\n"
    ".block.owner { text-align: right; }\n"
    ".block.centered { text-align: center; color: #555; font-style: italic; }\n"
    ".sender { font-weight: 600; font-size: 0.85em; }\n"
    ".time { color: #888; font-size: 0.75em; margin-left: 0.5em; }\n"
    ".bubble { display: inline-block; white-space: pre-wrap; padding: 0.3em 0.7em; "
    "border-radius: 8px; background: #eee; margin: 1px 0; }\n"
    ".owner .bubble { background: #0078d4; color: #fff; }\n"
)

_CENTERED_KINDS = {MessageKind.SYSTEM, MessageKind.CALL, MessageKind.NOTICE}
LEGACY_TEXT_TAG = "Text"


def _render_media(message: NormalizedMessage, media_store: MediaStore) -> str:
    """Return an <img> or <video> element for a resolved media message."""

    asset = media_store.primary_asset(message.media_ref)
    if asset is None:
        return ""
    src = html.escape(asset.resolve().as_uri())
    if media_store.media_type(message.media_ref) == "video":
        thumbnail = media_store.thumbnail(message.media_ref)
        poster = (
            f' poster="{html.escape(thumbnail.resolve().as_uri())}"' if thumbnail else ""
        )
        return f'<video controls src="{src}"{poster}></video>'
    return f'<img class="media" src="{src}" alt="">'


def _message_body(
    message: NormalizedMessage,
    query: Optional[str],
    media_store: Optional[MediaStore],
) -> str:
    body = message.content
    if message.original_type_tag == LEGACY_TEXT_TAG:
        # Legacy plain-text records are not sanitized upstream.
        body = html.escape(body)
    if query:
        body = highlight_search_match(body, query)
    if message.kind is MessageKind.MEDIA and media_store is not None:
        body = _render_media(message, media_store) + body
    return body


def _render_block(
    block: List[NormalizedMessage],
    query: Optional[str],
    media_store: Optional[MediaStore] = None,
) -> str:
    """Render one visual block; the sender line is shown once."""

    first = block[0]
    classes = ["block"]
    if first.kind in _CENTERED_KINDS:
        classes.append("centered")
    elif first.is_owner:
        classes.append("owner")

    parts = [f'<div class="{" ".join(classes)}">']
    if first.kind not in _CENTERED_KINDS:
        sender = first.display_name or first.sender_id or "Unknown"
        parts.append(
            f'<div class="sender">{html.escape(sender)}'
            f'<span class="time">{format_message_time(first.timestamp)}</span></div>'
        )
    for message in block:
        body = _message_body(message, query, media_store)
        parts.append(f'<div><span class="bubble">{body}</span></div>')
    parts.append("</div>")
    return "\n".join(parts)


def render_conversation_html(
    conversation: Conversation,
    messages: List[NormalizedMessage],
    query: Optional[str] = None,
    media_store: Optional[MediaStore] = None,
) -> str:
    """Return a full HTML document for one conversation.

    ``messages`` are in export order (newest first); the document reads
    oldest first.
    """

    title = html.escape(conversation.label)
    sections: List[str] = []
    display_order = list(reversed(messages))
    for date_key, bucket in group_messages_by_date(display_order).items():
        sections.append(f'<div class="date">{html.escape(date_key)}</div>')
        for block in build_message_blocks(bucket):
            sections.append(_render_block(block, query, media_store))

    return (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
        f"<title>{title}</title><style>{_CSS}</style></head>\n<body>\n"
        f"<h1>{title}</h1>\n" + "\n".join(sections) + "\n</body></html>\n"
    )


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments for the exporter.

    Args:
        argv: Optional list of arguments to parse.

    Returns:
        Parsed arguments namespace.
    """

    parser = argparse.ArgumentParser(
        description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("input", help="Skype messages.json or its folder")
    parser.add_argument("output", help="Output directory for HTML documents")
    parser.add_argument(
        "--conversation",
        "-c",
        action="append",
        default=None,
        help="Conversation id or name to render (repeatable; default: all)",
    )
    parser.add_argument(
        "--swap-roles",
        action="store_true",
        help="Render from the counterpart's perspective",
    )
    parser.add_argument(
        "--query",
        "-q",
        default=None,
        help="Highlight this text in message bodies",
    )
    add_media_dir_argument(parser)
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    """Program entry: write one HTML document per selected conversation.

    Returns:
        Exit code: 0 on success; non-zero on errors.
    """

    args = parse_args(argv)
    try:
        export_path = resolve_export_path(Path(args.input))
        export = load_export(export_path)
    except ExportLoadError as err:
        sys.stderr.write(f"{err}\n")
        return 2

    try:
        conversations = (
            [select_conversation(export.conversations, key) for key in args.conversation]
            if args.conversation
            else export.conversations
        )
    except ValueError as err:
        sys.stderr.write(f"{err}\n")
        return 1

    media_store = resolve_media_store(args.media_dir, export_path)

    out_dir = Path(args.output).expanduser().resolve()
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        sys.stderr.write(f"Failed to create output directory {out_dir}: {err}\n")
        return 2

    written = 0
    for conversation in conversations:
        messages = process_messages(
            conversation.records,
            export.user_id,
            perspective_swapped=args.swap_roles,
            media_store=media_store,
        )
        if not messages:
            continue
        out_path = out_dir / f"{slugify(conversation.label)}.html"
        try:
            out_path.write_text(
                render_conversation_html(
                    conversation, messages, args.query, media_store
                ),
                encoding="utf-8",
            )
            written += 1
        except OSError as err:
            sys.stderr.write(f"[WARN] Failed to write {out_path}: {err}\n")

    print(f"Wrote {written} conversations to {out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
