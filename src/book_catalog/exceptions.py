"""Exception hierarchy for book-catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from book_catalog.types import FieldError

__all__ = [
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
]


class CatalogError(Exception):
    """Base exception for all book-catalog errors.

    Request handling code raises exceptions derived from this class so the
    HTTP layer can map each kind to a status code in one place.
    """


class BookNotFoundError(CatalogError):
    """Raised when a book id does not match any stored book.

    Attributes:
        book_id: The id that was looked up
    """

    def __init__(self, book_id: int) -> None:
        """Initialize BookNotFoundError.

        Args:
            book_id: The id that was looked up
        """
        self.book_id = book_id
        super().__init__(f"Book not found: {book_id}")


class AuthorNotFoundError(CatalogError):
    """Raised when an author reference carries an id that does not exist.

    Attributes:
        author_id: The referenced id
        field: Payload path of the offending reference (e.g. ``authors[1].id``)
    """

    def __init__(self, author_id: int, field: str = "authors") -> None:
        """Initialize AuthorNotFoundError.

        Args:
            author_id: The referenced id
            field: Payload path of the offending reference
        """
        self.author_id = author_id
        self.field = field
        super().__init__(f"Author not found: {author_id}")


class ValidationFailedError(CatalogError):
    """Raised when a payload or entity violates one or more field constraints.

    Attributes:
        errors: Every failure found, in the order they were detected
    """

    def __init__(self, errors: list[FieldError]) -> None:
        """Initialize ValidationFailedError.

        Args:
            errors: Every failure found, in the order they were detected
        """
        self.errors = list(errors)
        summary = "; ".join(f"{error.field}: {error.message}" for error in self.errors)
        super().__init__(f"Validation failed: {summary}")


class ImageError(CatalogError):
    """Base exception for inline image payloads that cannot be accepted."""


class MalformedImageError(ImageError):
    """Raised when an image is not a ``data:image/<type>;base64,<payload>`` URI.

    This also covers payloads that are not valid base64 or decode to nothing.
    """


class UnsupportedImageTypeError(ImageError):
    """Raised when the declared image type is not on the allow-list.

    Attributes:
        image_type: The declared (lower-cased) type
    """

    def __init__(self, image_type: str) -> None:
        """Initialize UnsupportedImageTypeError.

        Args:
            image_type: The declared (lower-cased) type
        """
        self.image_type = image_type
        super().__init__(f"Unsupported image type: {image_type}")


class ImageTooLargeError(ImageError):
    """Raised when a decoded image exceeds the size ceiling.

    Attributes:
        size: Decoded size in bytes
        limit: Maximum accepted size in bytes
    """

    def __init__(self, size: int, limit: int) -> None:
        """Initialize ImageTooLargeError.

        Args:
            size: Decoded size in bytes
            limit: Maximum accepted size in bytes
        """
        self.size = size
        self.limit = limit
        super().__init__(f"Image size {size} exceeds the limit of {limit} bytes")


class StorageError(CatalogError):
    """Base exception for all image storage errors.

    Storage backends raise exceptions derived from this class so callers can
    handle failures the same way regardless of where images live.
    """


class StorageFileNotFoundError(StorageError):
    """Raised when a requested file does not exist in storage.

    Attributes:
        key: The storage key that was not found
    """

    def __init__(self, key: str) -> None:
        """Initialize StorageFileNotFoundError.

        Args:
            key: The storage key that was not found
        """
        self.key = key
        super().__init__(f"File not found: {key}")


class StoragePermissionError(StorageError):
    """Raised when the operation fails due to insufficient permissions.

    This typically occurs when file system permissions prevent a write or
    delete in the images directory.
    """


class ConfigurationError(StorageError):
    """Raised when storage backend configuration is invalid.

    For example when the images directory is missing and may not be created.
    """
