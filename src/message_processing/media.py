"""Media identifier extraction and lookup of exported media files.

Skype exports media next to ``messages.json`` using a fixed naming
convention keyed by the media id found in message markup:

- ``{id}.1.{ext}``: the primary asset;
- ``{id}.2.jpeg``: a thumbnail (videos);
- ``{id}.json``: a sidecar with at least a ``filename`` field.

A missing file is a normal outcome and is reported as ``None``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .patterns import IMAGE_EXTS, MEDIA_ID_PATTERNS, VIDEO_EXTS

LOGGER = logging.getLogger(__name__)

PRIMARY_VARIANT = "1"
THUMBNAIL_VARIANT = "2"
_JPEG_ALTERNATIVES = {"jpg": "jpeg", "jpeg": "jpg"}


def extract_media_id(content: str) -> Optional[str]:
    """Return the media id referenced by ``content`` or ``None``.

    Handles, in order: ``<URIObject uri=".../v1/objects/{id}">``, a ``pic=``
    query parameter and a ``file=`` query parameter.
    """

    if not content:
        return None
    for pattern in MEDIA_ID_PATTERNS:
        match = pattern.search(content)
        if match:
            return match.group(1)
    return None


def get_file_extension(filename: str) -> str:
    """Return the lower-cased extension of ``filename`` without the dot."""

    _, dot, extension = filename.rpartition(".")
    return extension.lower() if dot else ""


def is_image_extension(extension: str) -> bool:
    return extension.lower() in IMAGE_EXTS


def is_video_extension(extension: str) -> bool:
    return extension.lower() in VIDEO_EXTS


class MediaStore:
    """Resolve media ids to files from an exported ``media`` directory.

    Parameters
    ----------
    files:
        Mapping from bare file name (for example ``"abc.1.jpg"``) to its path.
        Use :meth:`from_directory` to build one from a folder.
    """

    def __init__(self, files: Mapping[str, Path]) -> None:
        self._files: Dict[str, Path] = {name: Path(path) for name, path in files.items()}

    @classmethod
    def from_directory(cls, root: Path) -> "MediaStore":
        """Index every regular file directly or nested under ``root``."""

        root_path = Path(root)
        files: Dict[str, Path] = {}
        if root_path.is_dir():
            for path in sorted(root_path.rglob("*")):
                if path.is_file() and path.name not in files:
                    files[path.name] = path
        return cls(files)

    def __len__(self) -> int:
        return len(self._files)

    def metadata(self, media_id: str) -> Optional[Dict[str, Any]]:
        """Return the parsed ``{id}.json`` sidecar, or ``None``."""

        path = self._files.get(f"{media_id}.json")
        if path is None:
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as err:
            LOGGER.warning("Failed to read media metadata %s: %s", path, err)
            return None
        if not isinstance(data, dict):
            return None
        return data

    def _extension(self, media_id: str) -> str:
        metadata = self.metadata(media_id)
        if not metadata:
            return ""
        filename = metadata.get("filename")
        if not isinstance(filename, str):
            return ""
        return get_file_extension(filename)

    def primary_asset(self, media_id: str) -> Optional[Path]:
        """Return the ``{id}.1.{ext}`` file, trying jpg/jpeg alternatives."""

        extension = self._extension(media_id)
        if not extension:
            return None

        path = self._files.get(f"{media_id}.{PRIMARY_VARIANT}.{extension}")
        if path is None and is_image_extension(extension):
            alternative = _JPEG_ALTERNATIVES.get(extension)
            if alternative:
                path = self._files.get(f"{media_id}.{PRIMARY_VARIANT}.{alternative}")
        return path

    def thumbnail(self, media_id: str) -> Optional[Path]:
        return self._files.get(f"{media_id}.{THUMBNAIL_VARIANT}.jpeg")

    def media_type(self, media_id: str) -> Optional[str]:
        """Return ``"image"``, ``"video"`` or ``None`` from the sidecar name."""

        extension = self._extension(media_id)
        if not extension:
            return None
        if is_image_extension(extension):
            return "image"
        if is_video_extension(extension):
            return "video"
        return None


def describe_media(store: MediaStore, media_id: str) -> Dict[str, Optional[str]]:
    """Summarise the exported files for ``media_id`` as JSON-ready strings."""

    metadata = store.metadata(media_id) or {}
    filename = metadata.get("filename")
    primary = store.primary_asset(media_id)
    thumbnail = store.thumbnail(media_id)
    return {
        "id": media_id,
        "type": store.media_type(media_id),
        "filename": filename if isinstance(filename, str) else None,
        "path": str(primary) if primary is not None else None,
        "thumbnail": str(thumbnail) if thumbnail is not None else None,
    }


__all__ = [
    "MediaStore",
    "describe_media",
    "extract_media_id",
    "get_file_extension",
    "is_image_extension",
    "is_video_extension",
]
