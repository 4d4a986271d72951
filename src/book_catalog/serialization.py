"""Mapping between JSON payloads and entities.

Inbound parsing only reads the writable fields of a book payload. Outbound
response dataclasses include relational fields and timestamps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from book_catalog.types import AuthorRef, BookWrite, FieldError

if TYPE_CHECKING:
    from book_catalog.models import Author, Book

__all__ = (
    "AuthorResponse",
    "AuthorSummary",
    "BookResponse",
    "BookSummary",
    "format_datetime",
    "parse_book_payload",
    "parse_datetime",
)


def parse_datetime(value: str) -> datetime:
    """Parse an ISO 8601 timestamp, accepting a trailing ``Z``, and convert it to UTC.

    Naive timestamps are taken to be UTC already.

    Raises:
        ValueError: If value is not ISO 8601
    """
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _optional_string(data: dict[str, Any], key: str, field: str, errors: list[FieldError]) -> str | None:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    errors.append(FieldError(field, "invalid_type", "This value should be of type string."))
    return None


def _parse_author_ref(item: Any, index: int, errors: list[FieldError]) -> AuthorRef | None:
    prefix = f"authors[{index}]"
    if not isinstance(item, dict):
        errors.append(FieldError(prefix, "invalid_type", "This value should be of type object."))
        return None

    if item.get("id") is not None:
        author_id = item["id"]
        # bool is an int subclass
        if isinstance(author_id, bool) or not isinstance(author_id, int):
            errors.append(FieldError(f"{prefix}.id", "invalid_type", "This value should be of type integer."))
            return None
        return AuthorRef(id=author_id)

    count = len(errors)
    name = _optional_string(item, "name", f"{prefix}.name", errors)
    surname = _optional_string(item, "surname", f"{prefix}.surname", errors)
    patronymic = _optional_string(item, "patronymic", f"{prefix}.patronymic", errors)
    for key, value in (("name", name), ("surname", surname)):
        if value is None and key not in item:
            errors.append(FieldError(f"{prefix}.{key}", "required", "This field is missing."))
    if len(errors) > count:
        return None

    # An empty patronymic means "none"
    return AuthorRef(name=name, surname=surname, patronymic=patronymic or None)


def parse_book_payload(data: dict[str, Any]) -> tuple[BookWrite, list[FieldError]]:
    """Read the writable fields of a book payload.

    ``id``, ``created_at`` and ``updated_at`` are ignored if present. Values
    of the wrong type are reported as errors, missing values are left as None
    for validation to report.

    Returns:
        The parsed payload and the list of type errors found
    """
    errors: list[FieldError] = []
    payload = BookWrite(
        title=_optional_string(data, "title", "title", errors),
        description=_optional_string(data, "description", "description", errors),
        image=_optional_string(data, "image", "image", errors),
    )

    published_at = data.get("published_at")
    if isinstance(published_at, str) and published_at.strip():
        try:
            payload.published_at = parse_datetime(published_at)
        except ValueError:
            errors.append(FieldError("published_at", "invalid_datetime", "This value is not a valid datetime."))
    elif published_at is not None and not isinstance(published_at, str):
        errors.append(FieldError("published_at", "invalid_type", "This value should be of type string."))

    authors = data.get("authors")
    if isinstance(authors, list):
        for index, item in enumerate(authors):
            ref = _parse_author_ref(item, index, errors)
            if ref is not None:
                payload.authors.append(ref)
    elif authors is not None:
        errors.append(FieldError("authors", "invalid_type", "This value should be of type array."))

    return payload, errors


@dataclass
class AuthorSummary:
    """Author as shown inside a book."""

    id: int
    name: str
    surname: str
    patronymic: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_author(cls, author: Author) -> AuthorSummary:
        return cls(
            id=author.id,
            name=author.name,
            surname=author.surname,
            patronymic=author.patronymic,
            created_at=format_datetime(author.created_at),
            updated_at=format_datetime(author.updated_at),
        )


@dataclass
class BookSummary:
    """Book as shown inside an author, without nesting the authors again."""

    id: int
    title: str
    description: str | None
    image: str
    published_at: str | None
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_book(cls, book: Book) -> BookSummary:
        return cls(
            id=book.id,
            title=book.title,
            description=book.description,
            image=book.image,
            published_at=format_datetime(book.published_at),
            created_at=format_datetime(book.created_at),
            updated_at=format_datetime(book.updated_at),
        )


@dataclass
class BookResponse(BookSummary):
    """Response model for a book with its authors."""

    authors: list[AuthorSummary] = field(default_factory=list)

    @classmethod
    def from_book(cls, book: Book) -> BookResponse:
        summary = BookSummary.from_book(book)
        return cls(**vars(summary), authors=[AuthorSummary.from_author(author) for author in book.authors])


@dataclass
class AuthorResponse(AuthorSummary):
    """Response model for an author with the books they wrote.

    ``author.books`` must have been loaded by the query.
    """

    books: list[BookSummary] = field(default_factory=list)

    @classmethod
    def from_author(cls, author: Author) -> AuthorResponse:
        summary = AuthorSummary.from_author(author)
        return cls(**vars(summary), books=[BookSummary.from_book(book) for book in author.books])
