"""Litestar application factory and error mapping."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from litestar import Litestar, Response, get
from litestar.exceptions import HTTPException
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from book_catalog.config import Settings
from book_catalog.controllers import AuthorController, BookController
from book_catalog.database import Database, DatabaseConfig
from book_catalog.exceptions import (
    AuthorNotFoundError,
    BookNotFoundError,
    ImageError,
    ValidationFailedError,
)
from book_catalog.plugin import CatalogPlugin
from book_catalog.storage import FileSystemConfig, FileSystemStorage
from book_catalog.types import FieldError

if TYPE_CHECKING:
    from litestar.connection import Request

    from book_catalog.storage import Storage

__all__ = ("create_app",)

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int,
    detail: str,
    extra: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> Response:
    content: dict[str, Any] = {"status_code": status_code, "detail": detail}
    if extra is not None:
        content["extra"] = extra
    return Response(content=content, status_code=status_code, headers=headers)


def book_not_found_handler(_: Request, exc: BookNotFoundError) -> Response:
    return _error_response(HTTP_404_NOT_FOUND, "Book not found")


def validation_failed_handler(_: Request, exc: ValidationFailedError) -> Response:
    return _error_response(
        HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation failed",
        [error.to_dict() for error in exc.errors],
    )


def author_not_found_handler(_: Request, exc: AuthorNotFoundError) -> Response:
    error = FieldError(exc.field, "not_found", f"Author {exc.author_id} does not exist.")
    return _error_response(HTTP_422_UNPROCESSABLE_ENTITY, "Validation failed", [error.to_dict()])


def image_error_handler(_: Request, exc: ImageError) -> Response:
    return _error_response(HTTP_400_BAD_REQUEST, str(exc))


def http_exception_handler(_: Request, exc: HTTPException) -> Response:
    """Framework errors (unknown route, wrong method, unparseable body) in the same shape."""
    extra = exc.extra if isinstance(exc.extra, list) else None
    return _error_response(exc.status_code, exc.detail, extra, dict(exc.headers or {}))


def internal_error_handler(request: Request, exc: Exception) -> Response:
    """Anything unhandled becomes a bare 500 with no internal detail."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


def create_app(
    settings: Settings | None = None,
    *,
    images: Storage | None = None,
    database: Database | None = None,
) -> Litestar:
    """Create and configure the Litestar application.

    Args:
        settings: Explicit settings. Read from the environment when omitted.
        images: Image storage backend. Defaults to a FileSystemStorage at
            ``settings.images_path``.
        database: Database to use. Defaults to one built from ``settings.database_url``.

    Returns:
        Configured Litestar application
    """
    settings = settings or Settings()
    logging.getLogger("book_catalog").setLevel(settings.log_level.upper())

    if images is None:
        images = FileSystemStorage(FileSystemConfig(path=settings.images_path))
    if database is None:
        database = Database(DatabaseConfig(url=settings.database_url, echo=settings.database_echo))

    return Litestar(
        route_handlers=[health, BookController, AuthorController],
        plugins=[CatalogPlugin(database=database, images=images, max_image_size=settings.max_image_size)],
        exception_handlers={
            BookNotFoundError: book_not_found_handler,
            ValidationFailedError: validation_failed_handler,
            AuthorNotFoundError: author_not_found_handler,
            ImageError: image_error_handler,
            HTTPException: http_exception_handler,
            Exception: internal_error_handler,
        },
        debug=settings.debug,
    )


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "book_catalog.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
