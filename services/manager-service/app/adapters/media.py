"""Filesystem storage for manager profile images."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from ..domain.contracts import ImageUpload

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


class LocalImageStore:
    """Writes images below ``root`` and serves them from ``base_url``."""

    def __init__(self, root: str | Path, base_url: str, *, max_bytes: int = 5 * 1024 * 1024) -> None:
        self._root = Path(root)
        self._base_url = base_url.rstrip("/")
        self._max_bytes = max_bytes

    def upload(self, manager_id: str, image: ImageUpload) -> str | None:
        """Store ``image`` and return its public URL, or ``None`` for unsupported or oversized files."""
        extension = IMAGE_EXTENSIONS.get(image.content_type.lower())
        if extension is None:
            logger.warning("rejected image with content type %s", image.content_type)
            return None
        if not image.content or len(image.content) > self._max_bytes:
            logger.warning("rejected image of %s bytes", len(image.content))
            return None

        name = f"{uuid.uuid4().hex}{extension}"
        target_dir = self._root / "managers" / manager_id
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / name).write_bytes(image.content)
        return f"{self._base_url}/managers/{manager_id}/{name}"

    def discard(self, url: str) -> None:
        """Remove a file previously returned by :meth:`upload`; unknown URLs are ignored."""
        prefix = f"{self._base_url}/"
        if not url.startswith(prefix):
            logger.warning("refusing to discard %s, not served from this store", url)
            return
        target = (self._root / url[len(prefix):]).resolve()
        if self._root.resolve() not in target.parents:
            logger.warning("refusing to discard %s, outside the media root", url)
            return
        target.unlink(missing_ok=True)
