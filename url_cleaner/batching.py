"""Batch processing of submitted URL lists."""

from __future__ import annotations

from typing import Dict, List, Sequence, Union

from .logging import get_logger
from .models import DuplicateProvenance, ImportRef, ProcessedURL, ProcessResult, URLRecord
from .normalizer import normalize
from .storage import URLStore

logger = get_logger(__name__)

# A seen cleaned URL maps either to the provenance of an already stored
# record or to the index of the first record with that URL in this batch.
SeenEntry = Union[DuplicateProvenance, int]


class BatchProcessor:
    """Normalize a batch of URLs and flag duplicates within one profile."""

    def __init__(self, store: URLStore) -> None:
        self._store = store

    def _load_seen(self, profile_id: str) -> Dict[str, SeenEntry]:
        imports = {
            summary.id: ImportRef(id=summary.id, alias=summary.alias, created_at=summary.created_at)
            for summary in self._store.list_imports(profile_id)
        }
        seen: Dict[str, SeenEntry] = {}
        for record in self._store.list_profile_urls(profile_id):
            if record.cleaned_url in seen:
                continue
            seen[record.cleaned_url] = DuplicateProvenance(
                id=record.id,
                original_url=record.original_url,
                created_at=record.created_at,
                import_ref=imports[record.import_id],
            )
        return seen

    def process_urls(
        self,
        profile_name: str,
        import_alias: str,
        raw_urls: Sequence[str],
    ) -> ProcessResult:
        """Normalize ``raw_urls`` into a new import under ``profile_name``.

        Every input URL is stored and reported, in input order. A URL is a
        duplicate when its cleaned form was already present in the profile or
        appeared earlier in the same batch. The loop is order dependent and
        must stay sequential.
        """
        profile = self._store.find_or_create_profile(profile_name)
        new_import = self._store.create_import(profile.id, import_alias)
        seen = self._load_seen(profile.id)

        drafts: List[URLRecord] = []
        for raw_url in raw_urls:
            cleaned_url, domain = normalize(raw_url)
            is_duplicate = cleaned_url in seen
            drafts.append(
                URLRecord(
                    profile_id=profile.id,
                    import_id=new_import.id,
                    original_url=raw_url,
                    cleaned_url=cleaned_url,
                    domain=domain,
                    is_duplicate=is_duplicate,
                )
            )
            if not is_duplicate:
                seen[cleaned_url] = len(drafts) - 1

        stored = self._store.add_urls(drafts)

        this_import = ImportRef(
            id=new_import.id, alias=new_import.alias, created_at=new_import.created_at
        )
        processed_urls = []
        for record in stored:
            duplicate_of = None
            if record.is_duplicate:
                entry = seen[record.cleaned_url]
                if isinstance(entry, int):
                    first = stored[entry]
                    duplicate_of = DuplicateProvenance(
                        id=first.id,
                        original_url=first.original_url,
                        created_at=first.created_at,
                        import_ref=this_import,
                    )
                else:
                    duplicate_of = entry
            processed_urls.append(
                ProcessedURL(
                    original_url=record.original_url,
                    cleaned_url=record.cleaned_url,
                    domain=record.domain,
                    is_duplicate=record.is_duplicate,
                    duplicate_of=duplicate_of,
                )
            )

        result = ProcessResult(
            profile_name=profile.name,
            alias=new_import.alias,
            import_id=new_import.id,
            processed_urls=processed_urls,
        )
        logger.info(
            "Processed URL batch",
            profile=profile.name,
            import_id=new_import.id,
            processed=result.processed,
            duplicates=result.duplicates,
        )
        return result


__all__ = ["BatchProcessor"]
