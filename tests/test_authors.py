"""Tests for resolving author references against the database."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import func, select

from book_catalog.authors import AuthorResolver
from book_catalog.exceptions import AuthorNotFoundError
from book_catalog.models import Author
from book_catalog.types import AuthorRef

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def add_author(session: AsyncSession, name: str, surname: str, patronymic: str | None = None) -> Author:
    author = Author(name=name, surname=surname, patronymic=patronymic)
    session.add(author)
    await session.commit()
    return author


async def count_authors(session: AsyncSession) -> int:
    return (await session.execute(select(func.count()).select_from(Author))).scalar_one()


@pytest.mark.unit
class TestResolve:
    """Test find-or-create of author references."""

    async def test_by_id(self, session: AsyncSession) -> None:
        stored = await add_author(session, "Anton", "Chekhov")

        resolved = await AuthorResolver(session).resolve([AuthorRef(id=stored.id)])

        assert resolved == [stored]

    async def test_unknown_id(self, session: AsyncSession) -> None:
        stored = await add_author(session, "Anton", "Chekhov")

        with pytest.raises(AuthorNotFoundError) as exc_info:
            await AuthorResolver(session).resolve([AuthorRef(id=stored.id), AuthorRef(id=404)])

        assert exc_info.value.author_id == 404
        assert exc_info.value.field == "authors[1].id"

    async def test_new_author_is_built_but_not_added(self, session: AsyncSession) -> None:
        resolved = await AuthorResolver(session).resolve([AuthorRef(name="Ivan", surname="Bunin")])

        assert len(resolved) == 1
        assert resolved[0].id is None
        assert resolved[0] not in session
        assert await count_authors(session) == 0

    async def test_existing_triple_is_reused(self, session: AsyncSession) -> None:
        stored = await add_author(session, "Mikhail", "Bulgakov", "Afanasyevich")

        resolved = await AuthorResolver(session).resolve(
            [AuthorRef(name="Mikhail", surname="Bulgakov", patronymic="Afanasyevich")]
        )

        assert resolved == [stored]

    async def test_match_is_exact(self, session: AsyncSession) -> None:
        await add_author(session, "Mikhail", "Bulgakov", "Afanasyevich")

        resolved = await AuthorResolver(session).resolve([AuthorRef(name="Mikhail", surname="Bulgakov")])

        assert resolved[0].id is None

    async def test_null_patronymic_matches_null(self, session: AsyncSession) -> None:
        stored = await add_author(session, "Anton", "Chekhov")

        resolved = await AuthorResolver(session).resolve([AuthorRef(name="Anton", surname="Chekhov")])

        assert resolved == [stored]

    async def test_duplicate_triples_collapse(self, session: AsyncSession) -> None:
        refs = [
            AuthorRef(name="Ilya", surname="Ilf"),
            AuthorRef(name="Yevgeny", surname="Petrov"),
            AuthorRef(name="Ilya", surname="Ilf"),
        ]

        resolved = await AuthorResolver(session).resolve(refs)

        assert [author.surname for author in resolved] == ["Ilf", "Petrov"]

    async def test_id_and_triple_of_same_author_collapse(self, session: AsyncSession) -> None:
        stored = await add_author(session, "Anton", "Chekhov")

        resolved = await AuthorResolver(session).resolve(
            [AuthorRef(name="Anton", surname="Chekhov"), AuthorRef(id=stored.id)]
        )

        assert resolved == [stored]

    async def test_order_is_kept(self, session: AsyncSession) -> None:
        first = await add_author(session, "Anton", "Chekhov")
        second = await add_author(session, "Ivan", "Bunin")

        resolved = await AuthorResolver(session).resolve([AuthorRef(id=second.id), AuthorRef(id=first.id)])

        assert resolved == [second, first]


@pytest.mark.unit
class TestLookup:
    """Test reading authors with their books."""

    async def test_get_unknown(self, session: AsyncSession) -> None:
        assert await AuthorResolver(session).get(1) is None

    async def test_get_loads_books(self, session: AsyncSession) -> None:
        stored = await add_author(session, "Anton", "Chekhov")
        session.expunge_all()

        author = await AuthorResolver(session).get(stored.id)

        assert author is not None
        assert author.books == []

    async def test_list(self, session: AsyncSession) -> None:
        await add_author(session, "Anton", "Chekhov")
        await add_author(session, "Ivan", "Bunin")

        authors = await AuthorResolver(session).list()

        assert [author.surname for author in authors] == ["Chekhov", "Bunin"]
