"""Field validation for books and authors.

Each validator returns every failure it finds instead of stopping at the first
one, so a client can fix a payload in a single round trip.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from book_catalog.types import FieldError

if TYPE_CHECKING:
    from book_catalog.models import Author, Book

__all__ = (
    "NOT_BLANK_MESSAGE",
    "validate_author",
    "validate_book",
)

NOT_BLANK_MESSAGE = "This value should not be blank."
TITLE_MAX_LENGTH = 255
NAME_MAX_LENGTH = 255
SURNAME_MIN_LENGTH = 3


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _not_blank(field: str, value: object) -> list[FieldError]:
    if _is_blank(value):
        return [FieldError(field, "not_blank", NOT_BLANK_MESSAGE)]
    return []


def _max_length(field: str, value: str | None, limit: int) -> list[FieldError]:
    if value is not None and len(value) > limit:
        return [FieldError(field, "max_length", f"This value is too long. It should have {limit} characters or less.")]
    return []


def validate_author(author: Author, prefix: str = "") -> list[FieldError]:
    """Check an author's name fields.

    Args:
        author: Author to check
        prefix: Path prepended to every field name (``authors[2].``)
    """
    errors = _not_blank(f"{prefix}name", author.name)
    errors += _max_length(f"{prefix}name", author.name, NAME_MAX_LENGTH)

    surname_errors = _not_blank(f"{prefix}surname", author.surname)
    if not surname_errors and len(author.surname.strip()) < SURNAME_MIN_LENGTH:
        surname_errors.append(
            FieldError(
                f"{prefix}surname",
                "min_length",
                f"Surname must be at least {SURNAME_MIN_LENGTH} characters",
            )
        )
    errors += surname_errors
    errors += _max_length(f"{prefix}surname", author.surname, NAME_MAX_LENGTH)
    errors += _max_length(f"{prefix}patronymic", author.patronymic, NAME_MAX_LENGTH)
    return errors


def validate_book(book: Book) -> list[FieldError]:
    """Check a book and any of its authors that are not stored yet.

    Authors that already have an id were validated when they were first
    stored and are not checked again.
    """
    errors = _not_blank("title", book.title)
    errors += _max_length("title", book.title, TITLE_MAX_LENGTH)
    errors += _not_blank("image", book.image)
    errors += _not_blank("published_at", book.published_at)

    if not book.authors:
        errors.append(FieldError("authors", "count_min", "At least one author must be specified"))

    for index, author in enumerate(book.authors):
        if author.id is None:
            errors += validate_author(author, prefix=f"authors[{index}].")

    return errors
