"""Business logic for the URL Cleaner service."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .batching import BatchProcessor
from .config import Settings
from .duplicates import DuplicateResolver
from .errors import InputValidationError, NotFoundError
from .exporter import ExportPayload, render_export
from .logging import get_logger
from .models import (
    ExportFormat,
    ImportSummary,
    PaginatedURLs,
    ProcessResult,
    Profile,
    ProfileStats,
    ProfileSummary,
    URLFilters,
)
from .queries import URLQueryService
from .storage import URLStore

logger = get_logger(__name__)

# "/api/urls/import/..." is routed to import-scoped endpoints.
RESERVED_PROFILE_NAMES = frozenset({"import"})


class URLCleanerService:
    """Entry point used by the API layer."""

    def __init__(self, store: URLStore, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.store = store
        self.batch_processor = BatchProcessor(store)
        self.resolver = DuplicateResolver(store)
        self.queries = URLQueryService(
            store, self.resolver, export_page_size=self.settings.export_page_size
        )

    @staticmethod
    def _require_text(value: Optional[str], message: str) -> str:
        if value is None or not value.strip():
            raise InputValidationError(message)
        return value.strip()

    @classmethod
    def _require_profile_name(cls, value: Optional[str]) -> str:
        name = cls._require_text(value, "Profile name is required")
        if name in RESERVED_PROFILE_NAMES:
            raise InputValidationError(f"Profile name '{name}' is reserved")
        return name

    def build_filters(
        self,
        domain: Optional[str] = None,
        is_duplicate: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> URLFilters:
        size = page_size or self.settings.default_page_size
        return URLFilters(
            domain=domain,
            is_duplicate=is_duplicate,
            search=search,
            page=page,
            page_size=min(size, self.settings.max_page_size),
        )

    # Profiles -----------------------------------------------------------------

    def list_profiles(self) -> List[ProfileSummary]:
        return self.store.list_profiles()

    def create_profile(self, name: Optional[str]) -> Profile:
        profile = self.store.create_profile(self._require_profile_name(name))
        logger.info("Created profile", profile=profile.name, profile_id=profile.id)
        return profile

    def require_profile(self, name: str) -> Profile:
        profile = self.store.get_profile_by_name(name)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    def profile_stats(self, name: str) -> ProfileStats:
        return self.store.profile_stats(self.require_profile(name).id)

    # Imports ------------------------------------------------------------------

    def process_urls(
        self,
        profile_name: Optional[str],
        alias: Optional[str],
        urls: Sequence[str],
    ) -> ProcessResult:
        """Validate a submission and run it through the batch processor."""
        name = self._require_profile_name(profile_name)
        import_alias = self._require_text(alias, "Import alias is required")
        if not urls:
            raise InputValidationError("No valid URLs provided")
        return self.batch_processor.process_urls(name, import_alias, list(urls))

    def list_imports(self, profile_name: str) -> List[ImportSummary]:
        profile = self.store.get_profile_by_name(profile_name)
        if profile is None:
            return []
        return self.store.list_imports(profile.id)

    def delete_import(self, import_id: str) -> None:
        self.store.delete_import(import_id)
        logger.info("Deleted import", import_id=import_id)

    # Listings -----------------------------------------------------------------

    def list_import_urls(self, import_id: str, filters: Optional[URLFilters] = None) -> PaginatedURLs:
        return self.queries.list_import_urls(import_id, filters or self.build_filters())

    def list_profile_urls(
        self, profile_name: str, filters: Optional[URLFilters] = None
    ) -> PaginatedURLs:
        return self.queries.list_profile_urls(profile_name, filters or self.build_filters())

    def export_import(
        self, import_id: str, export_format: ExportFormat, filters: Optional[URLFilters] = None
    ) -> ExportPayload:
        urls = self.queries.export_import_urls(import_id, filters)
        logger.info("Exported import URLs", import_id=import_id, format=export_format.value, count=len(urls))
        return render_export(urls, export_format)

    def export_profile(
        self, profile_name: str, export_format: ExportFormat, filters: Optional[URLFilters] = None
    ) -> ExportPayload:
        urls = self.queries.export_profile_urls(profile_name, filters)
        logger.info("Exported profile URLs", profile=profile_name, format=export_format.value, count=len(urls))
        return render_export(urls, export_format)


__all__ = ["RESERVED_PROFILE_NAMES", "URLCleanerService"]
