"""Resolution of author references into Author entities."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from book_catalog.exceptions import AuthorNotFoundError
from book_catalog.models import Author

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from book_catalog.types import AuthorRef

__all__ = ("AuthorResolver",)

logger = logging.getLogger(__name__)


class AuthorResolver:
    """Finds or creates the authors named by a book payload.

    New authors are built but not added to the session. They reach the
    database through the book that references them, once that book has
    passed validation, so a rejected request never leaves authors behind.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def resolve(self, refs: Iterable[AuthorRef]) -> list[Author]:
        """Turn references into authors, keeping input order.

        A reference by id must name an existing author. A reference by name
        matches an existing author on (name, surname, patronymic) exactly or
        creates a new one. Repeated references inside one call, by id or by
        the same triple, yield the author once, at its first position.

        Raises:
            AuthorNotFoundError: If a reference carries an unknown id
        """
        by_id: dict[int, Author] = {}
        by_identity: dict[tuple[str | None, str | None, str | None], Author] = {}
        resolved: list[Author] = []

        for index, ref in enumerate(refs):
            if ref.is_reference:
                author = by_id.get(ref.id)
                if author is None:
                    author = await self.session.get(Author, ref.id)
                    if author is None:
                        raise AuthorNotFoundError(ref.id, field=f"authors[{index}].id")
            else:
                author = by_identity.get(ref.identity)
                if author is None:
                    author = await self.find_by_identity(ref.name, ref.surname, ref.patronymic)
                if author is None:
                    author = Author(name=ref.name, surname=ref.surname, patronymic=ref.patronymic)
                    logger.debug("New author %s %s", ref.name, ref.surname)
                by_identity[ref.identity] = author

            if author.id is not None:
                by_id[author.id] = author
            if not any(existing is author for existing in resolved):
                resolved.append(author)

        return resolved

    async def find_by_identity(self, name: str | None, surname: str | None, patronymic: str | None) -> Author | None:
        """Exact match on the name triple. A None patronymic only matches NULL."""
        statement = select(Author).where(Author.name == name, Author.surname == surname)
        if patronymic is None:
            statement = statement.where(Author.patronymic.is_(None))
        else:
            statement = statement.where(Author.patronymic == patronymic)
        result = await self.session.execute(statement.order_by(Author.id).limit(1))
        return result.scalars().first()

    async def get(self, author_id: int) -> Author | None:
        """Load one author together with their books, or None if the id is unknown."""
        statement = select(Author).where(Author.id == author_id).options(selectinload(Author.books))
        return (await self.session.execute(statement)).scalars().first()

    async def list(self) -> list[Author]:
        statement = select(Author).options(selectinload(Author.books)).order_by(Author.id)
        return list((await self.session.execute(statement)).scalars().all())
