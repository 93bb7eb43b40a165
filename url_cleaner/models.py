"""Pydantic models used by the URL Cleaner service."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from math import ceil
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys for API clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Profile(CamelModel):
    """A named bucket of imports."""

    id: str = Field(default_factory=new_id)
    name: str
    created_at: datetime = Field(default_factory=utcnow)


class Import(CamelModel):
    """One batch submission of URLs under a profile."""

    id: str = Field(default_factory=new_id)
    profile_id: str
    alias: str
    created_at: datetime = Field(default_factory=utcnow)


class URLRecord(CamelModel):
    """A single submitted URL and its canonical form."""

    id: str = Field(default_factory=new_id)
    profile_id: str
    import_id: str
    original_url: str
    cleaned_url: str
    domain: str
    is_duplicate: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    # Insertion order assigned by the store; breaks created_at ties.
    seq: int = Field(default=0, exclude=True)

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return self.created_at, self.seq


class ImportRef(CamelModel):
    id: str
    alias: str
    created_at: datetime


class ProfileRef(CamelModel):
    id: str
    name: str


class ImportDetail(ImportRef):
    """Import reference that also names its owning profile."""

    profile: ProfileRef


class DuplicateProvenance(CamelModel):
    """The earliest record a duplicate collides with."""

    id: str
    original_url: str
    created_at: datetime
    import_ref: ImportRef = Field(alias="import")


class URLListing(CamelModel):
    """A URL row as returned by listings, with its import and provenance."""

    id: str
    original_url: str
    cleaned_url: str
    domain: str
    is_duplicate: bool
    created_at: datetime
    import_ref: ImportDetail = Field(alias="import")
    duplicate_of: Optional[DuplicateProvenance] = None


class ProcessedURL(CamelModel):
    """Outcome of normalizing one submitted URL."""

    original_url: str
    cleaned_url: str
    domain: str
    is_duplicate: bool
    duplicate_of: Optional[DuplicateProvenance] = None


class ProcessResult(CamelModel):
    profile_name: str
    alias: str
    import_id: str
    processed_urls: List[ProcessedURL]

    @property
    def processed(self) -> int:
        return len(self.processed_urls)

    @property
    def duplicates(self) -> int:
        return sum(1 for url in self.processed_urls if url.is_duplicate)


class URLFilters(CamelModel):
    """Validated filter and pagination options for URL listings."""

    domain: Optional[str] = None
    is_duplicate: Optional[bool] = None
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=50, ge=1)

    @field_validator("domain", "search")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class ImportScope(BaseModel):
    """Restrict a listing to one import."""

    model_config = ConfigDict(frozen=True)

    import_id: str


class ProfileScope(BaseModel):
    """Restrict a listing to every import of one profile."""

    model_config = ConfigDict(frozen=True)

    profile_id: str


Scope = Union[ImportScope, ProfileScope]


class PaginatedURLs(CamelModel):
    urls: List[URLListing] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 50
    total_pages: int = 0

    @staticmethod
    def page_count(total_count: int, page_size: int) -> int:
        return ceil(total_count / page_size) if total_count else 0


class ImportSummary(CamelModel):
    id: str
    alias: str
    created_at: datetime
    url_count: int = 0
    duplicate_count: int = 0


class ProfileSummary(CamelModel):
    id: str
    name: str
    created_at: datetime
    import_count: int = 0
    url_count: int = 0


class ProfileStats(CamelModel):
    total_urls: int = 0
    duplicate_urls: int = 0
    unique_urls: int = 0
    unique_domains: int = 0


class ExportFormat(str, Enum):
    CSV = "csv"
    TXT = "txt"


class CreateProfileRequest(BaseModel):
    name: Optional[str] = None


__all__ = [
    "CamelModel",
    "CreateProfileRequest",
    "DuplicateProvenance",
    "ExportFormat",
    "Import",
    "ImportDetail",
    "ImportRef",
    "ImportScope",
    "ImportSummary",
    "PaginatedURLs",
    "ProcessResult",
    "ProcessedURL",
    "Profile",
    "ProfileRef",
    "ProfileScope",
    "ProfileStats",
    "ProfileSummary",
    "Scope",
    "URLFilters",
    "URLListing",
    "URLRecord",
    "new_id",
    "utcnow",
]
