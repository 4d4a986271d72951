"""In-memory image storage backend for testing and development."""

from __future__ import annotations

import hashlib
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime, timezone

from book_catalog.exceptions import StorageError, StorageFileNotFoundError
from book_catalog.storage.base import BaseStorage
from book_catalog.types import StoredFile

__all__ = ("MemoryConfig", "MemoryStorage")


def _generate_etag(data: bytes) -> str:
    """Generate an ETag from file data using MD5 hash."""
    return f'"{hashlib.md5(data, usedforsecurity=False).hexdigest()}"'


@dataclass
class MemoryConfig:
    """Configuration for in-memory storage.

    Attributes:
        max_size: Maximum total bytes to store (None for unlimited)
    """

    max_size: int | None = None


class MemoryStorage(BaseStorage):
    """Keeps images in a dictionary.

    Data is lost on restart, so this backend is meant for tests and local
    experiments only.

    Example:
        >>> storage = MemoryStorage()
        >>> await storage.put("cover.png", b"\\x89PNG...")
        >>> storage.keys
        ['cover.png']
    """

    def __init__(self, config: MemoryConfig | None = None) -> None:
        self.config = config or MemoryConfig()
        self._files: dict[str, tuple[bytes, StoredFile]] = {}

    @property
    def keys(self) -> list[str]:
        """Keys currently stored, in insertion order."""
        return list(self._files)

    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str | None = None,
    ) -> StoredFile:
        """Store data at the given key.

        Raises:
            StorageError: If max_size would be exceeded
        """
        if self.config.max_size is not None:
            current_size = sum(len(d) for k, (d, _) in self._files.items() if k != key)
            if current_size + len(data) > self.config.max_size:
                raise StorageError(f"Max size {self.config.max_size} would be exceeded")

        stored_file = StoredFile(
            key=key,
            size=len(data),
            content_type=content_type,
            etag=_generate_etag(data),
            last_modified=datetime.now(tz=timezone.utc),
        )
        self._files[key] = (data, stored_file)
        return stored_file

    async def get(self, key: str) -> AsyncIterator[bytes]:
        """Yield the stored bytes as a single chunk.

        Raises:
            StorageFileNotFoundError: If the file does not exist
        """
        if key not in self._files:
            raise StorageFileNotFoundError(key)

        data, _ = self._files[key]
        yield data

    async def delete(self, key: str) -> None:
        """Delete a file.

        Raises:
            StorageFileNotFoundError: If the file does not exist
        """
        if key not in self._files:
            raise StorageFileNotFoundError(key)

        del self._files[key]

    async def info(self, key: str) -> StoredFile:
        if key not in self._files:
            raise StorageFileNotFoundError(key)

        _, stored_file = self._files[key]
        return stored_file
