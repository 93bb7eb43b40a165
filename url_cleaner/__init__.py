"""Application factory and shared objects for the URL Cleaner service."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from .config import Settings, get_settings
from .logging import configure_logging, get_logger
from .services import URLCleanerService
from .storage import URLStore, create_store


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[URLStore] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    from .api import router as api_router

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.service_name,
        description="Cleans, deduplicates and groups submitted URLs by profile and import",
        version=settings.version,
    )

    app.state.settings = settings
    app.state.service = URLCleanerService(store or create_store(settings), settings)
    app.include_router(api_router)

    get_logger(__name__).info(
        "Application created", service=settings.service_name, store=settings.store_backend
    )
    return app


__all__ = ["create_app", "URLCleanerService"]
