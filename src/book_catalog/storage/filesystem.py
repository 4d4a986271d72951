"""Local filesystem image storage backend."""

from __future__ import annotations

import mimetypes
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

import aiofiles

from book_catalog.exceptions import ConfigurationError, StorageFileNotFoundError, StoragePermissionError
from book_catalog.storage.base import BaseStorage
from book_catalog.types import StoredFile

__all__ = ("FileSystemConfig", "FileSystemStorage")

READ_CHUNK_SIZE = 64 * 1024


@dataclass
class FileSystemConfig:
    """Where and how image files are written.

    Attributes:
        path: Directory holding the image files
        create_dirs: Create the directory, parents included, when it is missing
        permissions: Mode applied to every written file
    """

    path: Path
    create_dirs: bool = True
    permissions: int = 0o644


class FileSystemStorage(BaseStorage):
    """Image files kept as plain files in one local directory.

    Reads and writes go through aiofiles. Keys are normalized by
    _sanitize_key(), so no key can resolve outside ``config.path``.

    Example:
        >>> storage = FileSystemStorage(FileSystemConfig(path=Path("var/images")))
        >>> await storage.put("1f0c...9a.png", image_bytes)
    """

    def __init__(self, config: FileSystemConfig) -> None:
        """
        Raises:
            ConfigurationError: If the directory is missing and create_dirs is False
        """
        self.config = config

        if config.create_dirs:
            config.path.mkdir(parents=True, exist_ok=True)
        elif not config.path.is_dir():
            raise ConfigurationError(f"Images directory does not exist: {config.path}")

    def _sanitize_key(self, key: str) -> str:
        """Relative POSIX form of key with ``.`` and ``..`` resolved inside the base directory."""
        resolved: list[str] = []
        for segment in PurePosixPath(key.replace("\\", "/")).parts:
            if segment.strip("/") in ("", "."):
                continue
            if segment == "..":
                if resolved:
                    resolved.pop()
                continue
            resolved.append(segment)
        return "/".join(resolved)

    def _path_for(self, key: str) -> Path:
        return self.config.path / self._sanitize_key(key)

    def _existing_file(self, key: str) -> Path:
        path = self._path_for(key)
        if not path.is_file():
            raise StorageFileNotFoundError(key)
        return path

    def _describe(self, key: str, path: Path, content_type: str | None = None) -> StoredFile:
        stat_result = path.stat()
        return StoredFile(
            key=key,
            size=stat_result.st_size,
            content_type=content_type or mimetypes.guess_type(key)[0],
            last_modified=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
        )

    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str | None = None,
    ) -> StoredFile:
        """Write data to the file named by key, replacing any previous content.

        Raises:
            StoragePermissionError: If the file cannot be written
        """
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
            path.chmod(self.config.permissions)
        except OSError as e:
            raise StoragePermissionError(f"Cannot write image {key}: {e}") from e
        return self._describe(key, path, content_type)

    async def get(self, key: str) -> AsyncIterator[bytes]:
        """Yield the file content in chunks of READ_CHUNK_SIZE bytes.

        Raises:
            StorageFileNotFoundError: If the file does not exist
        """
        path = self._existing_file(key)
        async with aiofiles.open(path, "rb") as f:
            chunk = await f.read(READ_CHUNK_SIZE)
            while chunk:
                yield chunk
                chunk = await f.read(READ_CHUNK_SIZE)

    async def delete(self, key: str) -> None:
        """
        Raises:
            StorageFileNotFoundError: If the file does not exist
            StoragePermissionError: If the file cannot be removed
        """
        path = self._existing_file(key)
        try:
            path.unlink()
        except OSError as e:
            raise StoragePermissionError(f"Cannot delete image {key}: {e}") from e

    async def info(self, key: str) -> StoredFile:
        """
        Raises:
            StorageFileNotFoundError: If the file does not exist
        """
        return self._describe(key, self._existing_file(key))
