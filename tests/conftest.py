"""Shared pytest fixtures for book-catalog tests."""

from __future__ import annotations

import base64
import os
from collections.abc import AsyncGenerator
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from litestar import Litestar
    from litestar.testing import AsyncTestClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from book_catalog.database import Database
    from book_catalog.storage import FileSystemStorage, MemoryStorage


# ==================================================================================== #
# PYTEST CONFIGURATION
# ==================================================================================== #


def pytest_configure(config):
    """Configure pytest with custom settings and markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Tests going through the HTTP application")

    os.environ["PYTHONDONTWRITEBYTECODE"] = "1"


# ==================================================================================== #
# IMAGE DATA
# ==================================================================================== #

# Just the PNG signature and an IHDR chunk header; nothing here decodes the pixels
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x02\x00\x00\x00"
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9"


def data_uri(data: bytes, image_type: str = "png") -> str:
    """Build an inline image payload."""
    return f"data:image/{image_type};base64,{base64.b64encode(data).decode()}"


@pytest.fixture
def make_data_uri():
    return data_uri


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def png_data_uri() -> str:
    return data_uri(PNG_BYTES, "png")


@pytest.fixture
def jpeg_data_uri() -> str:
    return data_uri(JPEG_BYTES, "jpeg")


@pytest.fixture
def book_payload(png_data_uri: str) -> dict[str, Any]:
    """A valid create payload with one author referenced by name."""
    return {
        "title": "The Master and Margarita",
        "description": "A novel",
        "image": png_data_uri,
        "authors": [{"name": "Mikhail", "surname": "Bulgakov", "patronymic": "Afanasyevich"}],
        "published_at": "1967-01-01T00:00:00Z",
    }


# ==================================================================================== #
# STORAGE
# ==================================================================================== #


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Fresh memory storage instance for each test."""
    from book_catalog.storage import MemoryConfig, MemoryStorage

    return MemoryStorage(config=MemoryConfig())


@pytest.fixture
def filesystem_storage(tmp_path: Path) -> FileSystemStorage:
    """
    Filesystem storage in a temporary images directory.

    The directory does not exist beforehand so every test also exercises
    its creation.
    """
    from book_catalog.storage import FileSystemConfig, FileSystemStorage

    return FileSystemStorage(config=FileSystemConfig(path=tmp_path / "images", create_dirs=True))


@pytest.fixture
def images_dir(filesystem_storage: FileSystemStorage) -> Path:
    return filesystem_storage.config.path


# ==================================================================================== #
# DATABASE
# ==================================================================================== #


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}"


@pytest.fixture
async def database(database_url: str) -> AsyncGenerator[Database, None]:
    """Database with the schema created, disposed after the test."""
    from book_catalog.database import Database, DatabaseConfig

    db = Database(DatabaseConfig(url=database_url))
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


# ==================================================================================== #
# APPLICATION
# ==================================================================================== #


@pytest.fixture
def app(database_url: str, filesystem_storage: FileSystemStorage) -> Litestar:
    """Application backed by a temporary SQLite file and images directory."""
    from book_catalog.app import create_app
    from book_catalog.config import Settings

    settings = Settings(
        database_url=database_url,
        images_path=filesystem_storage.config.path,
        log_level="DEBUG",
    )
    return create_app(settings, images=filesystem_storage)


@pytest.fixture
async def client(app: Litestar) -> AsyncGenerator[AsyncTestClient, None]:
    """Test client; entering it runs the startup hooks (schema creation)."""
    from litestar.testing import AsyncTestClient

    async with AsyncTestClient(app=app) as client:
        yield client
