"""URL processing, listing and export endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response

from ..errors import InputValidationError, NotFoundError, StorageError
from ..exporter import ExportPayload
from ..logging import get_logger
from ..models import ExportFormat, ImportSummary, PaginatedURLs, ProfileStats, URLFilters, URLListing
from ..parser import URLParser
from ..services import URLCleanerService
from .dependencies import get_service, get_url_filters

router = APIRouter(prefix="/api/urls")
logger = get_logger(__name__)


def _download(payload: ExportPayload) -> Response:
    return Response(
        content=payload.content,
        media_type=payload.media_type,
        headers={"Content-Disposition": f'attachment; filename="{payload.filename}"'},
    )


@router.post("/process")
def process_urls(
    profile_name: Optional[str] = Form(None, alias="profileName"),
    alias: Optional[str] = Form(None),
    urls: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    service: URLCleanerService = Depends(get_service),
) -> Dict[str, Any]:
    """Normalize and store a batch of pasted or uploaded URLs."""
    if file is not None:
        candidates = URLParser.extract_urls_from_bytes(file.file.read())
    else:
        candidates = URLParser.extract_urls(urls or "")

    try:
        result = service.process_urls(profile_name, alias, candidates)
    except InputValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StorageError as exc:
        logger.error("Error processing URLs", error=str(exc), profile=profile_name)
        raise HTTPException(status_code=500, detail="Failed to process URLs") from exc

    return {
        "profileName": result.profile_name,
        "alias": result.alias,
        "importId": result.import_id,
        "processed": result.processed,
        "duplicates": result.duplicates,
        "urls": [url.model_dump(by_alias=True, mode="json") for url in result.processed_urls],
    }


@router.get("/profile/{profile_name}/imports", response_model=List[ImportSummary])
def list_imports(profile_name: str, service: URLCleanerService = Depends(get_service)):
    return service.list_imports(profile_name)


@router.delete("/imports/{import_id}")
def delete_import(import_id: str, service: URLCleanerService = Depends(get_service)):
    try:
        service.delete_import(import_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail="Import not found") from exc
    return {"success": True}


# Import-scoped routes are registered before the profile-scoped ones so that
# "/import/..." is never read as a profile name.


@router.get("/import/{import_id}", response_model=PaginatedURLs)
def list_import_urls(
    import_id: str,
    filters: URLFilters = Depends(get_url_filters),
    service: URLCleanerService = Depends(get_service),
):
    return service.list_import_urls(import_id, filters)


@router.get("/import/{import_id}/all", response_model=List[URLListing])
def list_all_import_urls(
    import_id: str,
    filters: URLFilters = Depends(get_url_filters),
    service: URLCleanerService = Depends(get_service),
):
    return service.queries.export_import_urls(import_id, filters)


@router.get("/import/{import_id}/export")
def export_import_urls(
    import_id: str,
    export_format: ExportFormat = Query(ExportFormat.CSV, alias="format"),
    filters: URLFilters = Depends(get_url_filters),
    service: URLCleanerService = Depends(get_service),
):
    return _download(service.export_import(import_id, export_format, filters))


@router.get("/{profile_name}", response_model=PaginatedURLs)
def list_profile_urls(
    profile_name: str,
    filters: URLFilters = Depends(get_url_filters),
    service: URLCleanerService = Depends(get_service),
):
    return service.list_profile_urls(profile_name, filters)


@router.get("/{profile_name}/all", response_model=List[URLListing])
def list_all_profile_urls(
    profile_name: str,
    filters: URLFilters = Depends(get_url_filters),
    service: URLCleanerService = Depends(get_service),
):
    return service.queries.export_profile_urls(profile_name, filters)


@router.get("/{profile_name}/export")
def export_profile_urls(
    profile_name: str,
    export_format: ExportFormat = Query(ExportFormat.CSV, alias="format"),
    filters: URLFilters = Depends(get_url_filters),
    service: URLCleanerService = Depends(get_service),
):
    return _download(service.export_profile(profile_name, export_format, filters))


@router.get("/{profile_name}/stats", response_model=ProfileStats)
def profile_stats(profile_name: str, service: URLCleanerService = Depends(get_service)):
    try:
        return service.profile_stats(profile_name)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail="Profile not found") from exc


__all__ = ["router"]
