"""SQLAlchemy models for books and authors."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

__all__ = ("Author", "Base", "Book", "book_author")


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class Base(DeclarativeBase):
    """Declarative base shared by every table."""


class TimestampMixin:
    """created_at on insert, updated_at on insert and every update."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )


book_author = Table(
    "book_author",
    Base.metadata,
    Column("book_id", Integer, ForeignKey("book.id", ondelete="CASCADE"), primary_key=True),
    Column("author_id", Integer, ForeignKey("author.id", ondelete="CASCADE"), primary_key=True),
)


class Author(TimestampMixin, Base):
    """A book author, identified by id or by (name, surname, patronymic)."""

    __tablename__ = "author"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    surname: Mapped[str] = mapped_column(String(255), nullable=False)
    patronymic: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Inverse of Book.authors. Book owns the association, this side is read-only.
    books: Mapped[list[Book]] = relationship(
        secondary=book_author,
        viewonly=True,
        lazy="raise",
        order_by="Book.id",
    )

    def __repr__(self) -> str:
        return f"Author(id={self.id!r}, name={self.name!r}, surname={self.surname!r})"


class Book(TimestampMixin, Base):
    """A book with a stored cover image and at least one author."""

    __tablename__ = "book"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str] = mapped_column(String(255), nullable=False)
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    authors: Mapped[list[Author]] = relationship(
        secondary=book_author,
        lazy="selectin",
        order_by="Author.id",
    )

    def __repr__(self) -> str:
        return f"Book(id={self.id!r}, title={self.title!r})"
