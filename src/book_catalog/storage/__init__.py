"""Image storage backends for book-catalog."""

from __future__ import annotations

from book_catalog.storage.base import BaseStorage, Storage
from book_catalog.storage.filesystem import FileSystemConfig, FileSystemStorage
from book_catalog.storage.memory import MemoryConfig, MemoryStorage

__all__ = (
    "BaseStorage",
    "FileSystemConfig",
    "FileSystemStorage",
    "MemoryConfig",
    "MemoryStorage",
    "Storage",
)
