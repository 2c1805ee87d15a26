"""Shared filesystem and JSON output helpers for the export commands."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, TextIO


def slugify(text: str) -> str:
    """Return a filesystem-friendly representation of text."""

    sanitized = re.sub(r"[^A-Za-z0-9._-]+", "_", text)
    return sanitized.strip("_") or "unnamed"


def ensure_dir(path: Path) -> None:
    """Create directory ``path`` and all parents if they do not exist."""

    Path(path).mkdir(parents=True, exist_ok=True)


def _sanitize(obj: Any) -> Any:
    """Recursively coerce strings to valid UTF-8 for safe JSON writing."""

    if isinstance(obj, str):
        # Lone surrogates from broken exports become U+FFFD
        return obj.encode("utf-8", errors="replace").decode("utf-8")
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_sanitize(x) for x in obj]
    return obj


def dump_json(obj: Any, handle: TextIO) -> None:
    """Write ``obj`` as pretty-printed JSON to an open text handle."""

    json.dump(_sanitize(obj), handle, ensure_ascii=False, indent=2)
    handle.write("\n")


def write_json(path: Path, obj: Any) -> None:
    """Write an object as pretty-printed UTF-8 JSON after sanitizing strings."""

    ensure_dir(Path(path).parent)
    with Path(path).open("w", encoding="utf-8", newline="\n") as handle:
        dump_json(obj, handle)
