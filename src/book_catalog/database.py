"""Database engine, session factory and the per-request session provider."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from book_catalog.models import Base

__all__ = ("Database", "DatabaseConfig")

logger = logging.getLogger(__name__)


@dataclass
class DatabaseConfig:
    """Configuration for the database connection.

    Attributes:
        url: SQLAlchemy async URL (e.g. ``sqlite+aiosqlite:///./catalog.db``)
        echo: Log every SQL statement
        engine_options: Extra keyword arguments for create_async_engine
    """

    url: str
    echo: bool = False
    engine_options: dict[str, Any] = field(default_factory=dict)


class Database:
    """Owns the engine and hands out one session per request.

    Example:
        >>> database = Database(DatabaseConfig(url="sqlite+aiosqlite:///./catalog.db"))
        >>> await database.create_all()
        >>> async with database.session() as session:
        ...     ...
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self.config = config
        self.engine: AsyncEngine = create_async_engine(config.url, echo=config.echo, **config.engine_options)
        # expire_on_commit=False keeps committed entities readable for the response projection
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def create_all(self) -> None:
        """Create missing tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready at %s", self.engine.url.render_as_string(hide_password=True))

    async def provide_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session scoped to one request.

        Handlers commit explicitly once their work is complete. Anything left
        uncommitted when the request ends, including after an error, is rolled
        back when the session closes.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def dispose(self) -> None:
        await self.engine.dispose()
