"""Local object store for submission PDFs and images."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from urllib.parse import unquote, urlparse

from app.core.config import settings

logger = logging.getLogger(__name__)

_SAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class StorageError(Exception):
    """Raised when a blob cannot be written or removed."""


def sanitize_filename(name: str) -> str:
    """Return a filesystem-safe file name, keeping the extension."""
    cleaned = Path(name or "").name.strip().replace(" ", "_")
    cleaned = _SAFE_CHARS.sub("_", cleaned)
    cleaned = cleaned.strip("._-")
    return cleaned or "file"


class BlobStorage:
    """Bucket-style blob store rooted on the local filesystem.

    Objects live at ``<root>/<bucket>/<key>`` and are published under
    ``<public_base_url><media_prefix>/<bucket>/<key>``.
    """

    def __init__(
        self,
        root: str | Path | None = None,
        bucket: str | None = None,
        public_base_url: str | None = None,
        media_prefix: str | None = None,
    ) -> None:
        self.root = Path(root or settings.storage_root)
        self.bucket = bucket or settings.storage_bucket
        self.public_base_url = (public_base_url if public_base_url is not None else settings.public_base_url).rstrip("/")
        self.media_prefix = "/" + (media_prefix or settings.media_prefix).strip("/")

    @property
    def bucket_dir(self) -> Path:
        return self.root / self.bucket

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}{self.media_prefix}/{self.bucket}/{key}"

    def path_from_url(self, url: str) -> str | None:
        """Map a public URL (or a bare key) back to its object key."""
        if not url:
            return None
        parsed = urlparse(url)
        path = unquote(parsed.path)
        if not parsed.scheme and not path.startswith("/"):
            return path or None
        marker = f"/{self.bucket}/"
        if marker not in path:
            return None
        key = path.split(marker, 1)[1]
        return key or None

    def _resolve(self, key: str) -> Path:
        target = (self.bucket_dir / key).resolve()
        base = self.bucket_dir.resolve()
        if base != target and base not in target.parents:
            raise StorageError(f"Object key escapes bucket: {key}")
        return target

    def put(self, key: str, data: bytes) -> str:
        """Write ``data`` under ``key`` and return its public URL."""
        target = self._resolve(key)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Failed to store {key}: {exc}") from exc
        logger.debug("Stored blob %s (%s bytes)", key, len(data), extra={"blob_path": key})
        return self.public_url(key)

    def read(self, key: str) -> bytes:
        target = self._resolve(key)
        if not target.is_file():
            raise FileNotFoundError(key)
        return target.read_bytes()

    def exists(self, key: str) -> bool:
        try:
            return self._resolve(key).is_file()
        except StorageError:
            return False

    def delete(self, key: str, missing_ok: bool = True) -> None:
        """Remove one object; empty parent folders are pruned."""
        target = self._resolve(key)
        try:
            target.unlink()
        except FileNotFoundError:
            if not missing_ok:
                raise StorageError(f"Object not found: {key}")
            logger.info("Blob %s already absent", key, extra={"blob_path": key})
            return
        except OSError as exc:
            raise StorageError(f"Failed to delete {key}: {exc}") from exc
        parent = target.parent
        base = self.bucket_dir.resolve()
        while parent != base and base in parent.parents:
            try:
                parent.rmdir()
            except OSError:
                break
            parent = parent.parent
        logger.info("Deleted blob %s", key, extra={"blob_path": key})


__all__ = ["BlobStorage", "StorageError", "sanitize_filename"]
