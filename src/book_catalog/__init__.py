"""book-catalog - Async REST backend for books, their authors and cover images."""

from __future__ import annotations

from book_catalog.__metadata__ import __project__, __version__
from book_catalog.app import create_app
from book_catalog.authors import AuthorResolver
from book_catalog.config import Settings
from book_catalog.database import Database, DatabaseConfig
from book_catalog.exceptions import (
    AuthorNotFoundError,
    BookNotFoundError,
    CatalogError,
    ConfigurationError,
    ImageError,
    ImageTooLargeError,
    MalformedImageError,
    StorageError,
    StorageFileNotFoundError,
    StoragePermissionError,
    UnsupportedImageTypeError,
    ValidationFailedError,
)
from book_catalog.images import ImageStore, decode_data_uri
from book_catalog.models import Author, Book
from book_catalog.plugin import CatalogPlugin
from book_catalog.serialization import AuthorResponse, BookResponse
from book_catalog.services import BookService
from book_catalog.storage import (
    BaseStorage,
    FileSystemConfig,
    FileSystemStorage,
    MemoryConfig,
    MemoryStorage,
    Storage,
)
from book_catalog.types import AuthorRef, BookWrite, DecodedImage, FieldError, StoredFile

__all__ = (
    # Metadata
    "__project__",
    "__version__",
    # Application
    "CatalogPlugin",
    "Settings",
    "create_app",
    # Persistence
    "Author",
    "Book",
    "Database",
    "DatabaseConfig",
    # Request handling
    "AuthorResolver",
    "BookService",
    "ImageStore",
    "decode_data_uri",
    # Responses
    "AuthorResponse",
    "BookResponse",
    # Storage
    "BaseStorage",
    "FileSystemConfig",
    "FileSystemStorage",
    "MemoryConfig",
    "MemoryStorage",
    "Storage",
    # Exceptions
    "AuthorNotFoundError",
    "BookNotFoundError",
    "CatalogError",
    "ConfigurationError",
    "ImageError",
    "ImageTooLargeError",
    "MalformedImageError",
    "StorageError",
    "StorageFileNotFoundError",
    "StoragePermissionError",
    "UnsupportedImageTypeError",
    "ValidationFailedError",
    # Types
    "AuthorRef",
    "BookWrite",
    "DecodedImage",
    "FieldError",
    "StoredFile",
)
