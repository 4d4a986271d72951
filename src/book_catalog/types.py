"""Type definitions for book-catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

__all__ = (
    "AuthorRef",
    "BookWrite",
    "DecodedImage",
    "FieldError",
    "StoredFile",
)

_CONTENT_TYPES = {
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "png": "image/png",
}


@dataclass(frozen=True)
class StoredFile:
    """Metadata for a stored file.

    Attributes:
        key: Storage key for the file (the image filename)
        size: File size in bytes
        content_type: MIME type of the content
        etag: Entity tag for the file
        last_modified: Timestamp of last modification
    """

    key: str
    size: int
    content_type: str | None = None
    etag: str | None = None
    last_modified: datetime | None = None


@dataclass(frozen=True)
class DecodedImage:
    """Raw bytes of an inline image together with its validated extension."""

    data: bytes
    extension: str

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def content_type(self) -> str:
        return _CONTENT_TYPES.get(self.extension, "application/octet-stream")


@dataclass(frozen=True)
class FieldError:
    """A single validation failure.

    Attributes:
        field: Payload path of the failing value (``title``, ``authors[0].surname``)
        rule: Short machine-readable rule name (``not_blank``, ``min_length``...)
        message: Human readable description
    """

    field: str
    rule: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "rule": self.rule, "message": self.message}


@dataclass(frozen=True)
class AuthorRef:
    """Reference to an author inside a book payload.

    Either ``id`` is set (reference to an existing author) or the
    ``name``/``surname``/``patronymic`` triple is (find-or-create).
    """

    id: int | None = None
    name: str | None = None
    surname: str | None = None
    patronymic: str | None = None

    @property
    def is_reference(self) -> bool:
        return self.id is not None

    @property
    def identity(self) -> tuple[str | None, str | None, str | None]:
        return (self.name, self.surname, self.patronymic)


@dataclass
class BookWrite:
    """Inbound book payload after parsing.

    Server-assigned fields (id, timestamps) are never part of it.
    """

    title: str | None = None
    description: str | None = None
    image: str | None = None
    published_at: datetime | None = None
    authors: list[AuthorRef] = field(default_factory=list)
