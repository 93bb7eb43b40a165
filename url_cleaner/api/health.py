"""Health endpoints for the URL Cleaner service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..services import URLCleanerService
from .dependencies import get_service

router = APIRouter()


@router.get("/health")
async def health_check(service: URLCleanerService = Depends(get_service)) -> Dict[str, Any]:
    return {
        "status": "healthy",
        "service": service.settings.service_name,
        "version": service.settings.version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
