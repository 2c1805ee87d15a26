"""CLI helper utilities for shared argparse and logging patterns.

This module centralizes command-line argument definitions used by the export
rendering commands so that:

- Repeated argument groups (export input, perspective, output, logging)
  remain consistent across tools.
- Logging for command runs is configured in one place.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional


def add_export_input_argument(parser: argparse.ArgumentParser) -> None:
    """Add a required ``--input/-i`` argument for a Skype export.

    Parameters
    ----------
    parser:
        Target argument parser.
    """

    parser.add_argument(
        "--input",
        "-i",
        required=True,
        type=Path,
        help="Path to a Skype messages.json export or a folder containing one.",
    )


def add_conversation_argument(parser: argparse.ArgumentParser) -> None:
    """Add a repeatable ``--conversation/-c`` filter argument."""

    parser.add_argument(
        "--conversation",
        "-c",
        dest="conversations",
        action="append",
        default=None,
        help=(
            "Conversation id or display name to include. May be repeated; "
            "defaults to all conversations."
        ),
    )


def add_perspective_arguments(parser: argparse.ArgumentParser) -> None:
    """Add ``--swap-roles`` and ``--max-messages`` view arguments.

    Parameters
    ----------
    parser:
        Target argument parser.
    """

    parser.add_argument(
        "--swap-roles",
        action="store_true",
        help="Render conversations from the counterpart's perspective.",
    )
    parser.add_argument(
        "--max-messages",
        type=int,
        default=0,
        help="Only consider the first N records of each conversation (0: all).",
    )


def add_media_dir_argument(parser: argparse.ArgumentParser) -> None:
    """Add a shared ``--media-dir`` argument for exported media."""

    parser.add_argument(
        "--media-dir",
        type=Path,
        default=None,
        help=(
            "Directory holding exported media files "
            "(default: the media folder next to messages.json when present)."
        ),
    )


def add_output_path_argument(
    parser: argparse.ArgumentParser,
    *,
    help_text: str,
) -> None:
    """Add a shared ``--output/-o`` path argument.

    Parameters
    ----------
    parser:
        Target argument parser.
    help_text:
        Help string describing the output target.
    """

    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help=help_text,
    )


def add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    """Add shared ``--verbose`` and ``--log-file`` arguments."""

    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--log-file", type=Path, help="Write a detailed log file")


def configure_logging(
    name: str, *, verbose: bool, log_file: Optional[Path] = None
) -> logging.Logger:
    """Configure and return the named command logger.

    Console output shows bare messages at INFO when ``verbose`` and WARNING
    otherwise. An optional file handler records timestamped INFO output.
    Handlers from earlier calls are replaced.
    """

    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    console = logging.StreamHandler()
    console.setLevel(logging.INFO if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        )
        logger.addHandler(file_handler)
    return logger
