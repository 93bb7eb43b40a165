"""Extract candidate URLs from pasted text and uploaded exports."""

from __future__ import annotations

import re
from typing import List

from .normalizer import is_valid_url

# Separator used by OneTab-style exports: "<url> | <title>".
EXPORT_SEPARATOR = " | "

_URL_PATTERN = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)


class URLParser:
    """Turn free-form input into a plain list of URL strings."""

    @classmethod
    def extract_urls(cls, text: str) -> List[str]:
        """Return one URL per non-blank line.

        When the text looks like a "URL | description" export only the part
        before the first separator is kept. Lines not starting with ``http``
        are dropped.
        """
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        if EXPORT_SEPARATOR in text:
            lines = [line.split(EXPORT_SEPARATOR, 1)[0].strip() for line in lines]
        return [line for line in lines if line.startswith("http")]

    @classmethod
    def extract_urls_from_bytes(cls, content: bytes) -> List[str]:
        """Decode an uploaded file and extract its URLs."""
        text = content.decode("utf-8-sig", errors="ignore")
        return cls.extract_urls(text)

    @classmethod
    def find_urls_in_text(cls, text: str) -> List[str]:
        """Find URLs embedded anywhere in unstructured text."""
        return [match for match in _URL_PATTERN.findall(text) if is_valid_url(match)]


__all__ = ["EXPORT_SEPARATOR", "URLParser"]
