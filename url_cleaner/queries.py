"""Filtered, paginated listings of URL records."""

from __future__ import annotations

from typing import Dict, List, Optional

from .duplicates import DuplicateResolver
from .logging import get_logger
from .models import (
    ImportDetail,
    ImportScope,
    PaginatedURLs,
    ProfileRef,
    ProfileScope,
    Scope,
    URLFilters,
    URLListing,
    URLRecord,
)
from .storage import URLStore

logger = get_logger(__name__)

DEFAULT_EXPORT_PAGE_SIZE = 10000


class URLQueryService:
    """Apply scope, filters and pagination over stored URL records."""

    def __init__(
        self,
        store: URLStore,
        resolver: Optional[DuplicateResolver] = None,
        export_page_size: int = DEFAULT_EXPORT_PAGE_SIZE,
    ) -> None:
        self._store = store
        self._resolver = resolver or DuplicateResolver(store)
        self._export_page_size = export_page_size

    def _import_details(self, records: List[URLRecord]) -> Dict[str, ImportDetail]:
        details: Dict[str, ImportDetail] = {}
        profiles: Dict[str, ProfileRef] = {}
        for record in records:
            if record.import_id in details:
                continue
            owner = self._store.get_import(record.import_id)
            if owner is None:
                continue
            if owner.profile_id not in profiles:
                profile = self._store.get_profile(owner.profile_id)
                profiles[owner.profile_id] = ProfileRef(
                    id=owner.profile_id, name=profile.name if profile else ""
                )
            details[owner.id] = ImportDetail(
                id=owner.id,
                alias=owner.alias,
                created_at=owner.created_at,
                profile=profiles[owner.profile_id],
            )
        return details

    def list_urls(self, scope: Scope, filters: Optional[URLFilters] = None) -> PaginatedURLs:
        """Return one page of URLs in ``scope`` newest first.

        Duplicate rows carry the provenance of the record they collide with,
        or ``None`` when it can no longer be found.
        """
        filters = filters or URLFilters()
        total_count = self._store.count_urls(scope, filters)
        records = self._store.query_urls(scope, filters)
        details = self._import_details(records)

        urls = [
            URLListing(
                id=record.id,
                original_url=record.original_url,
                cleaned_url=record.cleaned_url,
                domain=record.domain,
                is_duplicate=record.is_duplicate,
                created_at=record.created_at,
                import_ref=details[record.import_id],
                duplicate_of=self._resolver.resolve(record),
            )
            for record in records
            if record.import_id in details
        ]

        return PaginatedURLs(
            urls=urls,
            total_count=total_count,
            page=filters.page,
            page_size=filters.page_size,
            total_pages=PaginatedURLs.page_count(total_count, filters.page_size),
        )

    def list_import_urls(self, import_id: str, filters: Optional[URLFilters] = None) -> PaginatedURLs:
        return self.list_urls(ImportScope(import_id=import_id), filters)

    def list_profile_urls(
        self, profile_name: str, filters: Optional[URLFilters] = None
    ) -> PaginatedURLs:
        """List URLs across all imports of a profile; unknown names yield an empty page."""
        filters = filters or URLFilters()
        profile = self._store.get_profile_by_name(profile_name)
        if profile is None:
            logger.info("Listing URLs for unknown profile", profile=profile_name)
            return PaginatedURLs(page=1, page_size=filters.page_size)
        return self.list_urls(ProfileScope(profile_id=profile.id), filters)

    def _export_filters(self, filters: Optional[URLFilters]) -> URLFilters:
        base = filters or URLFilters()
        return base.model_copy(update={"page": 1, "page_size": self._export_page_size})

    def export_import_urls(
        self, import_id: str, filters: Optional[URLFilters] = None
    ) -> List[URLListing]:
        """Return every matching URL of an import, ignoring pagination."""
        return self.list_import_urls(import_id, self._export_filters(filters)).urls

    def export_profile_urls(
        self, profile_name: str, filters: Optional[URLFilters] = None
    ) -> List[URLListing]:
        return self.list_profile_urls(profile_name, self._export_filters(filters)).urls


__all__ = ["DEFAULT_EXPORT_PAGE_SIZE", "URLQueryService"]
