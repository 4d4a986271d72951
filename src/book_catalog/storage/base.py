"""Base image storage protocol and abstract implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from book_catalog.types import StoredFile

__all__ = ["BaseStorage", "Storage"]


@runtime_checkable
class Storage(Protocol):
    """Async storage protocol for image files.

    Every backend implements this protocol so the request handlers behave the
    same whether images live on disk or in memory.
    """

    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str | None = None,
    ) -> StoredFile:
        """Store data at the given key.

        Args:
            key: Storage key for the file, usually a generated image filename
            data: File contents
            content_type: MIME type of the content. If not provided, backends
                may infer it from the key's extension.

        Returns:
            StoredFile describing what was written

        Raises:
            StorageError: If the write fails for any reason
            StoragePermissionError: If lacking permissions to write this key
        """
        ...

    def get(self, key: str) -> AsyncIterator[bytes]:
        """Retrieve file contents as an async byte stream.

        Args:
            key: Storage key for the file

        Yields:
            Chunks of file data as bytes. Chunk size is backend-dependent.

        Raises:
            StorageFileNotFoundError: If the file does not exist
        """
        ...

    async def delete(self, key: str) -> None:
        """Delete a file.

        Args:
            key: Storage key for the file

        Raises:
            StorageFileNotFoundError: If the file does not exist
            StoragePermissionError: If lacking permissions to delete this file
        """
        ...

    async def info(self, key: str) -> StoredFile:
        """Get metadata about a file without reading it.

        Args:
            key: Storage key for the file

        Returns:
            StoredFile with size, content type and modification time

        Raises:
            StorageFileNotFoundError: If the file does not exist
        """
        ...

    async def close(self) -> None:
        """Release backend resources. Called once on application shutdown."""
        ...


class BaseStorage(ABC):
    """Abstract base class for storage backends.

    Subclasses must implement put(), get(), delete() and info().
    close() defaults to a no-op.
    """

    @abstractmethod
    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str | None = None,
    ) -> StoredFile:
        """Store data at the given key. Must be implemented by subclasses."""

    @abstractmethod
    def get(self, key: str) -> AsyncIterator[bytes]:
        """Retrieve file as async byte stream. Must be implemented by subclasses."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a file. Must be implemented by subclasses."""

    @abstractmethod
    async def info(self, key: str) -> StoredFile:
        """Get file metadata. Must be implemented by subclasses."""

    async def close(self) -> None:  # noqa: B027
        """Default implementation: no-op."""
