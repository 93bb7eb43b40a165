"""Shared API dependencies and helpers."""

from __future__ import annotations

from typing import Optional

from fastapi import Query, Request

from ..models import URLFilters
from ..services import URLCleanerService


def get_service(request: Request) -> URLCleanerService:
    """Return the service instance attached to the application."""
    return request.app.state.service


def get_url_filters(
    request: Request,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, alias="pageSize", ge=1),
    domain: Optional[str] = Query(None),
    is_duplicate: Optional[bool] = Query(None, alias="isDuplicate"),
    search: Optional[str] = Query(None),
) -> URLFilters:
    """Validate listing query parameters into a ``URLFilters`` record."""
    service = get_service(request)
    return service.build_filters(
        domain=domain,
        is_duplicate=is_duplicate,
        search=search,
        page=page,
        page_size=page_size,
    )


__all__ = ["get_service", "get_url_filters"]
