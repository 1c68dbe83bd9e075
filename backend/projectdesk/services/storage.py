"""
File Storage

Bucket-style file storage on the local filesystem. Files are written
under `{root}/{bucket}/{key}` and served by the app's static mount at
`{base_url}/{bucket}/{key}`.
"""
import asyncio
import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from ..config import settings
from .base import PrimaryStoreError

logger = logging.getLogger(__name__)

ATTACHMENTS_BUCKET = "attachments"
CONFIGURATOR_IMAGES_BUCKET = "configurator-images"
PROJECT_FILES_BUCKET = "project-files"


class StorageError(PrimaryStoreError):
    """A file could not be stored or removed."""
    pass


def file_extension(filename: str, default: str = "bin") -> str:
    """Lower-case extension of an uploaded file name, without the dot."""
    _, ext = os.path.splitext(filename or "")
    return ext.lstrip(".").lower() or default


class LocalFileStorage:
    """Stores uploads on disk and hands back public URLs."""

    def __init__(self, root: Optional[str] = None, base_url: Optional[str] = None):
        self.root = Path(root or settings.media_root)
        self.base_url = (base_url if base_url is not None else settings.media_url).rstrip("/")

    def _path(self, bucket: str, key: str) -> Path:
        path = (self.root / bucket / key).resolve()
        bucket_root = (self.root / bucket).resolve()
        if bucket_root not in path.parents:
            raise StorageError(f"Invalid storage key: {key}")
        return path

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/{bucket}/{key}"

    async def save(self, bucket: str, key: str, data: bytes, upsert: bool = False) -> str:
        """
        Write a file and return its public URL.

        Raises:
            StorageError: if the key exists and upsert is False, or on I/O failure
        """
        path = self._path(bucket, key)

        def _write() -> None:
            if path.exists() and not upsert:
                raise FileExistsError(f"{bucket}/{key} already exists")
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.error(f"Error storing {bucket}/{key}: {e}")
            raise StorageError(f"Failed to store file {key}") from e

        logger.debug(f"Stored {len(data)} bytes at {bucket}/{key}")
        return self.public_url(bucket, key)

    async def remove(self, bucket: str, keys: Iterable[str]) -> None:
        """Delete files. Missing files are ignored."""
        paths = [self._path(bucket, key) for key in keys]

        def _unlink() -> None:
            for path in paths:
                path.unlink(missing_ok=True)

        try:
            await asyncio.to_thread(_unlink)
        except OSError as e:
            logger.error(f"Error removing files from {bucket}: {e}")
            raise StorageError(f"Failed to remove files from {bucket}") from e


_storage: Optional[LocalFileStorage] = None


def get_storage() -> LocalFileStorage:
    """Get the global storage instance."""
    global _storage
    if _storage is None:
        _storage = LocalFileStorage()
    return _storage
