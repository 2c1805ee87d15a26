"""Utility helper package for shared command helpers.

Submodules
----------
cli
    Shared argparse and logging configuration helpers for commands.
io
    Shared JSON output and filesystem helpers.
"""

from __future__ import annotations

__all__ = [
    "cli",
    "io",
]
