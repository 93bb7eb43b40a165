"""Render URL listings as downloadable CSV or plain text."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from io import StringIO
from typing import Iterable, List

from .models import ExportFormat, URLListing

CSV_HEADERS = ["Original URL", "Cleaned URL", "Domain", "Status", "Import", "Created At"]


@dataclass(frozen=True)
class ExportPayload:
    content: str
    media_type: str
    filename: str


def export_to_txt(urls: Iterable[URLListing]) -> str:
    """One cleaned URL per line."""
    return "\n".join(url.cleaned_url for url in urls)


def export_to_csv(urls: Iterable[URLListing]) -> str:
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for url in urls:
        writer.writerow(
            [
                url.original_url,
                url.cleaned_url,
                url.domain,
                "Duplicate" if url.is_duplicate else "Unique",
                url.import_ref.alias,
                url.created_at.isoformat(),
            ]
        )
    return output.getvalue()


def render_export(urls: List[URLListing], export_format: ExportFormat) -> ExportPayload:
    if export_format == ExportFormat.TXT:
        return ExportPayload(export_to_txt(urls), "text/plain", "cleaned-urls.txt")
    return ExportPayload(export_to_csv(urls), "text/csv", "urls.csv")


__all__ = ["CSV_HEADERS", "ExportPayload", "export_to_csv", "export_to_txt", "render_export"]
