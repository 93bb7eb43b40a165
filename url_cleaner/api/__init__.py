"""API routers for the URL Cleaner service."""

from __future__ import annotations

from fastapi import APIRouter

from .health import router as health_router
from .profiles import router as profiles_router
from .urls import router as urls_router

router = APIRouter()
router.include_router(health_router)
router.include_router(profiles_router)
router.include_router(urls_router)

__all__ = ["router"]
