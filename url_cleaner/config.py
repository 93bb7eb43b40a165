"""Configuration handling for the URL Cleaner service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    service_name: str = "URL Cleaner Service"
    version: str = "1.0.0"
    store_backend: Literal["memory", "sqlite"] = "memory"
    database_path: Path = Path("url_cleaner.db")
    default_page_size: int = Field(50, ge=1)
    # Keep at or above export_page_size.
    max_page_size: int = Field(10000, ge=1)
    # Page size used by the "export all" listings.
    export_page_size: int = Field(10000, ge=1)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="URL_CLEANER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
