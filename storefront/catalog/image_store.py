"""Image hosting: store bytes, hand back a URL."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Protocol

ALLOWED_IMAGE_SUFFIXES = frozenset({".jpg", ".jpeg", ".png", ".webp", ".gif"})


class ImageStore(Protocol):
    """Protocol for the object storage used by product uploads."""

    def save(self, data: bytes, *, filename: str, folder: str) -> str:
        """Persist ``data`` and return the public URL it is served from."""


class LocalImageStore:
    """Writes images below a media directory served as static files."""

    def __init__(self, media_dir: Path, url_prefix: str = "/media") -> None:
        self._media_dir = media_dir
        self._url_prefix = url_prefix.rstrip("/")
        self._media_dir.mkdir(parents=True, exist_ok=True)

    @property
    def media_dir(self) -> Path:
        return self._media_dir

    def save(self, data: bytes, *, filename: str, folder: str) -> str:
        suffix = Path(filename).suffix.lower()
        target_dir = self._media_dir / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        stored_name = f"{uuid.uuid4().hex}{suffix}"
        (target_dir / stored_name).write_bytes(data)
        return f"{self._url_prefix}/{folder}/{stored_name}"
