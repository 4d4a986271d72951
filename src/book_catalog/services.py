"""Create, update, read and delete handling for books."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from book_catalog.authors import AuthorResolver
from book_catalog.exceptions import BookNotFoundError, ValidationFailedError
from book_catalog.models import Book, utcnow
from book_catalog.serialization import parse_book_payload
from book_catalog.validation import validate_book

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from book_catalog.images import ImageStore
    from book_catalog.models import Author
    from book_catalog.types import BookWrite, StoredFile

__all__ = ("BookService",)

logger = logging.getLogger(__name__)


def _draft(payload: BookWrite, authors: list[Author]) -> Book:
    """Detached book carrying the payload values, used for validation only."""
    draft = Book(
        title=payload.title,
        description=payload.description,
        image=payload.image,
        published_at=payload.published_at,
    )
    draft.authors = authors
    return draft


class BookService:
    """Request handling for books, bound to one database session.

    The ordering inside create() and update() matters: payload errors, image
    errors and unknown author ids abort before anything is written, the image
    file is only written once validation has passed, and on update the
    previous image is removed only after the new state is committed.
    """

    def __init__(self, session: AsyncSession, images: ImageStore) -> None:
        self.session = session
        self.images = images
        self.authors = AuthorResolver(session)

    def _parse(self, data: dict[str, Any]) -> BookWrite:
        payload, errors = parse_book_payload(data)
        if errors:
            raise ValidationFailedError(errors)
        return payload

    async def _commit(self, written_image: str | None) -> None:
        """Commit, removing the image written for this commit if it fails."""
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            if written_image is not None:
                await self.images.remove(written_image)
            raise

    async def create(self, data: dict[str, Any]) -> Book:
        """Validate a payload and store it as a new book.

        Raises:
            ValidationFailedError: If the payload or the resulting book is invalid
            ImageError: If the image is malformed, of an unsupported type or too large
            AuthorNotFoundError: If an author reference names an unknown id
        """
        payload = self._parse(data)

        decoded = self.images.decode(payload.image) if payload.image else None
        authors = await self.authors.resolve(payload.authors)

        book = _draft(payload, authors)
        errors = validate_book(book)
        if errors:
            raise ValidationFailedError(errors)

        book.image = await self.images.save(decoded)
        self.session.add(book)
        await self._commit(book.image)

        logger.info("Created book %s with %d author(s)", book.id, len(book.authors))
        return book

    async def update(self, book_id: int, data: dict[str, Any]) -> Book:
        """Apply a payload to an existing book, replacing its authors.

        An ``image`` equal to the stored filename leaves the image alone. Any
        other value must be a new data URI.

        Raises:
            BookNotFoundError: If no book has this id
            ValidationFailedError: If the payload or the resulting book is invalid
            ImageError: If a new image is malformed, of an unsupported type or too large
            AuthorNotFoundError: If an author reference names an unknown id
        """
        book = await self.session.get(Book, book_id)
        if book is None:
            raise BookNotFoundError(book_id)

        payload = self._parse(data)

        previous_image = book.image
        image_changed = bool(payload.image) and payload.image != previous_image
        decoded = self.images.decode(payload.image) if image_changed else None

        authors = await self.authors.resolve(payload.authors)

        errors = validate_book(_draft(payload, authors))
        if errors:
            raise ValidationFailedError(errors)

        new_image = await self.images.save(decoded) if decoded is not None else None
        if new_image is not None:
            book.image = new_image
        book.title = payload.title
        book.description = payload.description
        book.published_at = payload.published_at
        book.authors = authors
        book.updated_at = utcnow()
        await self._commit(new_image)

        if new_image is not None:
            await self.images.remove(previous_image)

        logger.info("Updated book %s", book.id)
        return book

    async def get(self, book_id: int) -> Book:
        """Raises BookNotFoundError if no book has this id."""
        book = await self.session.get(Book, book_id)
        if book is None:
            raise BookNotFoundError(book_id)
        return book

    async def list(self) -> list[Book]:
        result = await self.session.execute(select(Book).order_by(Book.id))
        return list(result.scalars().all())

    async def delete(self, book_id: int) -> None:
        """Delete a book and then its image file.

        Raises:
            BookNotFoundError: If no book has this id
        """
        book = await self.get(book_id)
        image = book.image
        await self.session.delete(book)
        await self.session.commit()
        await self.images.remove(image)
        logger.info("Deleted book %s", book_id)

    async def open_image(self, book_id: int) -> tuple[StoredFile, AsyncIterator[bytes]]:
        """Metadata and content stream of a book's image.

        Raises:
            BookNotFoundError: If no book has this id
            StorageFileNotFoundError: If the image file is missing from storage
        """
        book = await self.get(book_id)
        return await self.images.open(book.image)
