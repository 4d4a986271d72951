"""Litestar plugin wiring storage, database and services into an application."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from litestar.di import Provide
from litestar.plugins import InitPluginProtocol
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: TC002 - needed at runtime for DI

from book_catalog.authors import AuthorResolver
from book_catalog.database import Database  # noqa: TC001 - needed at runtime for DI
from book_catalog.images import MAX_IMAGE_SIZE, ImageStore
from book_catalog.services import BookService
from book_catalog.storage.base import Storage  # noqa: TC001 - needed at runtime for DI

if TYPE_CHECKING:
    from litestar import Litestar
    from litestar.config.app import AppConfig

__all__ = ["CatalogPlugin"]

logger = logging.getLogger(__name__)


def provide_book_service(db_session: AsyncSession, image_store: ImageStore) -> BookService:
    return BookService(db_session, image_store)


def provide_author_resolver(db_session: AsyncSession) -> AuthorResolver:
    return AuthorResolver(db_session)


class CatalogPlugin(InitPluginProtocol):
    """Registers the catalog's dependencies and lifecycle hooks.

    Provides:
        - ``images_storage``: the image storage backend
        - ``image_store``: an ImageStore over that backend
        - ``db_session``: one AsyncSession per request
        - ``book_service`` and ``author_resolver`` bound to that session
        - table creation on startup, engine disposal and storage close on shutdown

    Example:
        ```python
        app = Litestar(
            route_handlers=[BookController, AuthorController],
            plugins=[
                CatalogPlugin(
                    database=Database(DatabaseConfig(url="sqlite+aiosqlite:///./catalog.db")),
                    images=FileSystemStorage(FileSystemConfig(path=Path("var/images"))),
                )
            ],
        )
        ```
    """

    __slots__ = ("create_schema", "database", "images", "max_image_size")

    def __init__(
        self,
        database: Database,
        images: Storage,
        *,
        max_image_size: int = MAX_IMAGE_SIZE,
        create_schema: bool = True,
    ) -> None:
        """Initialize the CatalogPlugin.

        Args:
            database: Database owning the engine and session factory
            images: Storage backend for image files
            max_image_size: Largest accepted decoded image in bytes
            create_schema: Create missing tables on startup
        """
        self.database = database
        self.images = images
        self.max_image_size = max_image_size
        self.create_schema = create_schema

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Register dependencies and lifecycle hooks, preserving existing ones."""
        dependencies = dict(app_config.dependencies or {})
        dependencies.update(
            {
                # sync_to_thread=False since these only build objects, no blocking I/O
                "images_storage": Provide(self._make_provider(self.images), sync_to_thread=False),
                "image_store": Provide(
                    self._make_provider(ImageStore(self.images, max_size=self.max_image_size)),
                    sync_to_thread=False,
                ),
                "db_session": Provide(self.database.provide_session),
                "book_service": Provide(provide_book_service, sync_to_thread=False),
                "author_resolver": Provide(provide_author_resolver, sync_to_thread=False),
            }
        )
        app_config.dependencies = dependencies

        on_startup = list(app_config.on_startup or [])
        on_startup.append(self._startup)
        app_config.on_startup = on_startup

        on_shutdown = list(app_config.on_shutdown or [])
        on_shutdown.append(self._shutdown)
        app_config.on_shutdown = on_shutdown

        return app_config

    async def _startup(self, _app: Litestar) -> None:
        if self.create_schema:
            await self.database.create_all()

    async def _shutdown(self, _app: Litestar) -> None:
        """Close the storage backend and dispose the engine.

        A storage that fails to close is logged so the engine is still disposed.
        """
        try:
            await self.images.close()
        except Exception as e:
            logger.warning("Error closing image storage: %s", e)
        await self.database.dispose()

    @staticmethod
    def _make_provider(value: object) -> Callable[[], object]:
        """Create a provider returning value, bound at creation time."""

        def provider() -> object:
            return value

        return provider
