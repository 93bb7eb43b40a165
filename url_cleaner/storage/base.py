"""Abstract persistence interface for profiles, imports and URL records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from ..errors import ProfileExistsError
from ..models import (
    Import,
    ImportSummary,
    Profile,
    ProfileStats,
    ProfileSummary,
    Scope,
    URLFilters,
    URLRecord,
)

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now(timezone.utc)


class URLStore(ABC):
    """Storage contract used by the batch processor, resolver and queries.

    Stores stamp ``created_at`` on everything they create and assign each URL
    record an increasing ``seq``. All records written by one ``add_urls``
    call share the same ``created_at``.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or system_clock

    def now(self) -> datetime:
        return self._clock()

    # Profiles -----------------------------------------------------------------

    @abstractmethod
    def get_profile(self, profile_id: str) -> Optional[Profile]:
        ...

    @abstractmethod
    def get_profile_by_name(self, name: str) -> Optional[Profile]:
        ...

    @abstractmethod
    def create_profile(self, name: str) -> Profile:
        """Create a profile, raising ``ProfileExistsError`` for a taken name."""

    def find_or_create_profile(self, name: str) -> Profile:
        profile = self.get_profile_by_name(name)
        if profile is not None:
            return profile
        try:
            return self.create_profile(name)
        except ProfileExistsError:
            # Lost a race with another writer; the profile exists now.
            existing = self.get_profile_by_name(name)
            if existing is None:
                raise
            return existing

    @abstractmethod
    def list_profiles(self) -> List[ProfileSummary]:
        """Return profiles newest first with import and URL counts."""

    # Imports ------------------------------------------------------------------

    @abstractmethod
    def create_import(self, profile_id: str, alias: str) -> Import:
        ...

    @abstractmethod
    def get_import(self, import_id: str) -> Optional[Import]:
        ...

    @abstractmethod
    def list_imports(self, profile_id: str) -> List[ImportSummary]:
        """Return the profile's imports newest first with URL counts."""

    @abstractmethod
    def delete_import(self, import_id: str) -> None:
        """Delete an import and its URLs, raising ``NotFoundError`` if absent."""

    # URL records --------------------------------------------------------------

    @abstractmethod
    def add_urls(self, records: Sequence[URLRecord]) -> List[URLRecord]:
        """Insert records in order and return them as stored."""

    @abstractmethod
    def list_profile_urls(self, profile_id: str) -> List[URLRecord]:
        """Return every record of a profile ordered oldest first."""

    @abstractmethod
    def query_urls(self, scope: Scope, filters: URLFilters) -> List[URLRecord]:
        """Return one page of matching records, newest first."""

    @abstractmethod
    def count_urls(self, scope: Scope, filters: URLFilters) -> int:
        ...

    @abstractmethod
    def find_earliest_url(
        self,
        profile_id: str,
        cleaned_url: str,
        exclude_id: Optional[str] = None,
        before: Optional[datetime] = None,
    ) -> Optional[URLRecord]:
        """Return the oldest record of a profile with ``cleaned_url``.

        ``before`` keeps only records created strictly earlier; ``exclude_id``
        skips one record. Ties on ``created_at`` go to the lowest ``seq``.
        """

    @abstractmethod
    def profile_stats(self, profile_id: str) -> ProfileStats:
        ...


__all__ = ["Clock", "URLStore", "system_clock"]
