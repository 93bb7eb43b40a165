"""In-memory store backed by plain dictionaries."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..errors import NotFoundError, ProfileExistsError
from ..models import (
    Import,
    ImportScope,
    ImportSummary,
    Profile,
    ProfileStats,
    ProfileSummary,
    Scope,
    URLFilters,
    URLRecord,
)
from .base import Clock, URLStore


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


def matches_filters(record: URLRecord, filters: URLFilters) -> bool:
    """Apply the listing filters to a single record."""
    if filters.domain and not _contains(record.domain, filters.domain):
        return False
    if filters.is_duplicate is not None and record.is_duplicate != filters.is_duplicate:
        return False
    if filters.search:
        fields = (record.original_url, record.cleaned_url, record.domain)
        if not any(_contains(field, filters.search) for field in fields):
            return False
    return True


class InMemoryURLStore(URLStore):
    """Simple repository abstraction around in-memory dictionaries."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        self._profiles: Dict[str, Profile] = {}
        self._imports: Dict[str, Import] = {}
        self._urls: Dict[str, URLRecord] = {}
        self._seq = 0

    def clear(self) -> None:
        self._profiles.clear()
        self._imports.clear()
        self._urls.clear()
        self._seq = 0

    # Profiles -----------------------------------------------------------------

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        return self._profiles.get(profile_id)

    def get_profile_by_name(self, name: str) -> Optional[Profile]:
        for profile in self._profiles.values():
            if profile.name == name:
                return profile
        return None

    def create_profile(self, name: str) -> Profile:
        if self.get_profile_by_name(name) is not None:
            raise ProfileExistsError(f"Profile '{name}' already exists")
        profile = Profile(name=name, created_at=self.now())
        self._profiles[profile.id] = profile
        return profile

    def list_profiles(self) -> List[ProfileSummary]:
        summaries = []
        for profile in self._profiles.values():
            import_ids = {imp.id for imp in self._imports.values() if imp.profile_id == profile.id}
            summaries.append(
                ProfileSummary(
                    id=profile.id,
                    name=profile.name,
                    created_at=profile.created_at,
                    import_count=len(import_ids),
                    url_count=sum(1 for url in self._urls.values() if url.import_id in import_ids),
                )
            )
        summaries.sort(key=lambda summary: summary.created_at, reverse=True)
        return summaries

    # Imports ------------------------------------------------------------------

    def create_import(self, profile_id: str, alias: str) -> Import:
        if profile_id not in self._profiles:
            raise NotFoundError("Profile not found")
        new_import = Import(profile_id=profile_id, alias=alias, created_at=self.now())
        self._imports[new_import.id] = new_import
        return new_import

    def get_import(self, import_id: str) -> Optional[Import]:
        return self._imports.get(import_id)

    def list_imports(self, profile_id: str) -> List[ImportSummary]:
        summaries = []
        for imp in self._imports.values():
            if imp.profile_id != profile_id:
                continue
            urls = [url for url in self._urls.values() if url.import_id == imp.id]
            summaries.append(
                ImportSummary(
                    id=imp.id,
                    alias=imp.alias,
                    created_at=imp.created_at,
                    url_count=len(urls),
                    duplicate_count=sum(1 for url in urls if url.is_duplicate),
                )
            )
        summaries.sort(key=lambda summary: summary.created_at, reverse=True)
        return summaries

    def delete_import(self, import_id: str) -> None:
        if import_id not in self._imports:
            raise NotFoundError("Import not found")
        del self._imports[import_id]
        for url_id in [url.id for url in self._urls.values() if url.import_id == import_id]:
            del self._urls[url_id]

    # URL records --------------------------------------------------------------

    def add_urls(self, records: Sequence[URLRecord]) -> List[URLRecord]:
        if any(record.import_id not in self._imports for record in records):
            raise NotFoundError("Import not found")
        created_at = self.now()
        stored = []
        for record in records:
            self._seq += 1
            saved = record.model_copy(update={"created_at": created_at, "seq": self._seq})
            self._urls[saved.id] = saved
            stored.append(saved)
        return stored

    def _in_scope(self, scope: Scope) -> List[URLRecord]:
        if isinstance(scope, ImportScope):
            return [url for url in self._urls.values() if url.import_id == scope.import_id]
        return [url for url in self._urls.values() if url.profile_id == scope.profile_id]

    def list_profile_urls(self, profile_id: str) -> List[URLRecord]:
        urls = [url for url in self._urls.values() if url.profile_id == profile_id]
        return sorted(urls, key=lambda url: url.sort_key)

    def query_urls(self, scope: Scope, filters: URLFilters) -> List[URLRecord]:
        matching = [url for url in self._in_scope(scope) if matches_filters(url, filters)]
        matching.sort(key=lambda url: url.sort_key, reverse=True)
        return matching[filters.offset : filters.offset + filters.page_size]

    def count_urls(self, scope: Scope, filters: URLFilters) -> int:
        return sum(1 for url in self._in_scope(scope) if matches_filters(url, filters))

    def find_earliest_url(
        self,
        profile_id: str,
        cleaned_url: str,
        exclude_id: Optional[str] = None,
        before: Optional[datetime] = None,
    ) -> Optional[URLRecord]:
        candidates = [
            url
            for url in self._urls.values()
            if url.profile_id == profile_id
            and url.cleaned_url == cleaned_url
            and url.id != exclude_id
            and (before is None or url.created_at < before)
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda url: url.sort_key)

    def profile_stats(self, profile_id: str) -> ProfileStats:
        urls = [url for url in self._urls.values() if url.profile_id == profile_id]
        duplicates = sum(1 for url in urls if url.is_duplicate)
        return ProfileStats(
            total_urls=len(urls),
            duplicate_urls=duplicates,
            unique_urls=len(urls) - duplicates,
            unique_domains=len({url.domain for url in urls}),
        )

    def __len__(self) -> int:
        return len(self._urls)


__all__ = ["InMemoryURLStore", "matches_filters"]
