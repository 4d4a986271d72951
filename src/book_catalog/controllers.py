"""Route controllers for books and authors."""

from __future__ import annotations

from typing import Annotated, Any

from litestar import Controller, delete, get, post, put
from litestar.enums import RequestEncodingType
from litestar.exceptions import NotFoundException
from litestar.params import Body
from litestar.response import Stream
from litestar.status_codes import HTTP_200_OK, HTTP_201_CREATED, HTTP_204_NO_CONTENT

from book_catalog.authors import AuthorResolver  # noqa: TC001 - needed at runtime for DI
from book_catalog.exceptions import StorageFileNotFoundError
from book_catalog.serialization import AuthorResponse, BookResponse
from book_catalog.services import BookService  # noqa: TC001 - needed at runtime for DI

__all__ = ("AuthorController", "BookController")

JSONBody = Annotated[dict[str, Any], Body(media_type=RequestEncodingType.JSON)]


class BookController(Controller):
    """Controller for book endpoints."""

    path = "/books"

    @get()
    async def list_books(self, book_service: BookService) -> list[BookResponse]:
        return [BookResponse.from_book(book) for book in await book_service.list()]

    @post(status_code=HTTP_201_CREATED)
    async def create_book(self, book_service: BookService, data: JSONBody) -> BookResponse:
        """Create a book from a JSON payload with an inline base64 image.

        Args:
            book_service: Injected book service
            data: ``{title, description?, image, authors, published_at}``

        Returns:
            Normalized created book
        """
        book = await book_service.create(data)
        return BookResponse.from_book(book)

    @get("/{book_id:int}")
    async def get_book(self, book_id: int, book_service: BookService) -> BookResponse:
        return BookResponse.from_book(await book_service.get(book_id))

    @put("/{book_id:int}", status_code=HTTP_200_OK)
    async def update_book(self, book_id: int, book_service: BookService, data: JSONBody) -> BookResponse:
        """Replace a book's fields and authors.

        Args:
            book_id: Book ID
            book_service: Injected book service
            data: Same shape as for creation. ``image`` may repeat the stored
                filename to keep the current image.

        Returns:
            Normalized updated book
        """
        book = await book_service.update(book_id, data)
        return BookResponse.from_book(book)

    @delete("/{book_id:int}", status_code=HTTP_204_NO_CONTENT)
    async def delete_book(self, book_id: int, book_service: BookService) -> None:
        await book_service.delete(book_id)

    @get("/{book_id:int}/image")
    async def download_image(self, book_id: int, book_service: BookService) -> Stream:
        """Stream a book's image.

        Raises:
            NotFoundException: If the image file is missing from storage
        """
        try:
            info, content = await book_service.open_image(book_id)
        except StorageFileNotFoundError as e:
            raise NotFoundException(detail=f"Image for book {book_id} not found") from e

        return Stream(
            content=content,
            media_type=info.content_type or "application/octet-stream",
        )


class AuthorController(Controller):
    """Controller for author endpoints (read only)."""

    path = "/authors"

    @get()
    async def list_authors(self, author_resolver: AuthorResolver) -> list[AuthorResponse]:
        return [AuthorResponse.from_author(author) for author in await author_resolver.list()]

    @get("/{author_id:int}")
    async def get_author(self, author_id: int, author_resolver: AuthorResolver) -> AuthorResponse:
        """Get an author with the books they wrote.

        Raises:
            NotFoundException: If author not found
        """
        author = await author_resolver.get(author_id)
        if author is None:
            raise NotFoundException(detail=f"Author {author_id} not found")
        return AuthorResponse.from_author(author)
