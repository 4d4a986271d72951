"""Application settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from book_catalog.images import MAX_IMAGE_SIZE

__all__ = ("Settings",)


class Settings(BaseSettings):
    """Settings read from ``CATALOG_*`` environment variables or a ``.env`` file."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./catalog.db"
    database_echo: bool = False

    # Images
    images_path: Path = Path("var/images")
    max_image_size: int = MAX_IMAGE_SIZE

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        extra="ignore",
    )
