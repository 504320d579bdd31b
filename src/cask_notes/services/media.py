"""Storage for images attached to posts.

Images live under a per-post namespace, ``posts/{owner}/{post_id}``. Media is
cache-like: losing it never blocks a post operation.
"""
from __future__ import annotations

import logging
import secrets
import shutil
import time
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from cask_notes.core.settings import settings
from cask_notes.models.post import Post

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS: frozenset[str] = frozenset({"jpg", "jpeg", "png", "webp", "gif"})
ANONYMOUS_NAMESPACE_OWNER = "anonymous"


class MediaStore(Protocol):
    """Minimal object-storage interface used by the post services."""

    def save(self, namespace: str, filename: str, data: bytes) -> str: ...

    def delete_namespace(self, namespace: str) -> int: ...


def post_media_namespace(post: Post) -> str:
    """Return the storage namespace holding ``post``'s images."""
    owner = post.owner_user_id or ANONYMOUS_NAMESPACE_OWNER
    return f"posts/{owner}/{post.id}"


def image_extension(filename: str) -> str:
    """Return the lower-cased extension of ``filename`` if it is an allowed image type.

    Raises:
        ValueError: If the extension is not an allowed image type.
    """
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValueError("Supported image formats are JPG, PNG, WebP and GIF.")
    return extension


def generate_filename(original_name: str) -> str:
    """Build a collision-resistant file name keeping the original extension."""
    extension = image_extension(original_name)
    return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}.{extension}"


class LocalMediaStore:
    """Filesystem-backed media store rooted at ``root``."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, namespace: str) -> Path:
        path = (self.root / namespace).resolve()
        if path != self.root and self.root not in path.parents:
            raise ValueError(f"Namespace escapes media root: {namespace!r}")
        return path

    def save(self, namespace: str, filename: str, data: bytes) -> str:
        """Write ``data`` under ``namespace`` and return its relative path."""
        image_extension(filename)
        directory = self._resolve(namespace)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / Path(filename).name
        target.write_bytes(data)
        return f"{namespace}/{target.name}"

    def delete_namespace(self, namespace: str) -> int:
        """Remove every file under ``namespace`` and return how many were removed."""
        directory = self._resolve(namespace)
        if not directory.exists():
            return 0
        removed = sum(1 for path in directory.rglob("*") if path.is_file())
        shutil.rmtree(directory)
        logger.debug("Removed %d media files under %s", removed, namespace)
        return removed


@lru_cache(maxsize=1)
def get_media_store() -> MediaStore:
    """Return the shared media store configured by ``MEDIA_ROOT``."""
    return LocalMediaStore(settings.media_root)
