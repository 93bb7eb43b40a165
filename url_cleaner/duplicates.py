"""Resolve which earlier record a duplicate URL collides with."""

from __future__ import annotations

from typing import Optional

from .logging import get_logger
from .models import DuplicateProvenance, ImportRef, URLRecord
from .storage import URLStore

logger = get_logger(__name__)


class DuplicateResolver:
    """Find the provenance of duplicate URL records."""

    def __init__(self, store: URLStore) -> None:
        self._store = store

    def find_original(self, record: URLRecord) -> Optional[URLRecord]:
        """Return the earliest other record in the profile with the same cleaned URL.

        Records created strictly earlier are preferred. When none exist
        (identical timestamps within a batch, or the original was deleted) the
        lookup is repeated without the time bound, excluding ``record`` itself.
        """
        original = self._store.find_earliest_url(
            record.profile_id, record.cleaned_url, before=record.created_at
        )
        if original is None:
            original = self._store.find_earliest_url(
                record.profile_id, record.cleaned_url, exclude_id=record.id
            )
        return original

    def resolve(self, record: URLRecord) -> Optional[DuplicateProvenance]:
        if not record.is_duplicate:
            return None

        original = self.find_original(record)
        if original is None:
            logger.debug("Duplicate origin unknown", url_id=record.id, cleaned_url=record.cleaned_url)
            return None

        owner = self._store.get_import(original.import_id)
        if owner is None:
            return None
        return DuplicateProvenance(
            id=original.id,
            original_url=original.original_url,
            created_at=original.created_at,
            import_ref=ImportRef(id=owner.id, alias=owner.alias, created_at=owner.created_at),
        )


__all__ = ["DuplicateResolver"]
