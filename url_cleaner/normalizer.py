"""URL canonicalization used for duplicate detection.

Two URLs are treated as the same resource when they are equal after
``normalize``: tracking query parameters are dropped, functional ones are
always kept, and a single trailing slash is removed from non-root paths.
"""

from __future__ import annotations

from typing import List, Optional, Tuple
from urllib.parse import SplitResult, parse_qsl, unquote_plus, urlencode, urlsplit, urlunsplit

from .logging import get_logger

logger = get_logger(__name__)

UNKNOWN_DOMAIN = "unknown"

# Query parameters whose only purpose is analytics or attribution.
TRACKING_PARAMS = (
    # UTM
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_term",
    "utm_content",
    # Facebook / Meta
    "fbclid",
    "fb_source",
    "fb_ref",
    # Google
    "gclid",
    "gclsrc",
    "dclid",
    # Generic referral markers
    "ref",
    "source",
    "referrer",
    "campaign",
    "medium",
    "origin",
    # Job boards
    "gh_src",
    "trackingId",
    "src",
    "tk",
    "from",
    "sponsored",
    # LinkedIn
    "refId",
    "trk",
    # Analytics / mailing lists
    "_ga",
    "_gac",
    "mc_cid",
    "mc_eid",
)

# Parameters needed to identify the resource; never removed.
FUNCTIONAL_PARAMS = (
    "gh_jid",
    "jid",
    "job_id",
    "jobId",
    "id",
    "posting_id",
    "t",
    "token",
    "application_id",
    "location",
    "department",
    "team",
    "category",
    "lever-origin",
    "lever-source",
)

_TRACKING_LOWER = frozenset(name.lower() for name in TRACKING_PARAMS)
_FUNCTIONAL_LOWER = frozenset(name.lower() for name in FUNCTIONAL_PARAMS)

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}
_SPECIAL_SCHEMES = frozenset(_DEFAULT_PORTS)


def is_functional_param(name: str) -> bool:
    """Return True if the parameter must survive normalization."""
    lowered = name.lower()
    if lowered in _FUNCTIONAL_LOWER:
        return True
    if "jid" in lowered:
        return True
    return "job" in lowered and "id" in lowered


def is_tracking_param(name: str) -> bool:
    """Return True if the parameter name matches a tracking marker."""
    lowered = name.lower()
    if lowered in _TRACKING_LOWER:
        return True
    return any(lowered.startswith(f"{tracking}_") for tracking in _TRACKING_LOWER)


def classify_parameter(name: str) -> str:
    """Classify a query parameter as ``functional``, ``tracking`` or ``neutral``."""
    if is_functional_param(name):
        return "functional"
    if is_tracking_param(name):
        return "tracking"
    return "neutral"


def _parse_absolute(url: str) -> Optional[SplitResult]:
    """Split ``url`` and return None unless it is an absolute URL with a host."""
    try:
        parts = urlsplit(url)
        # Accessing ``port`` validates it and raises on garbage.
        parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc or not parts.hostname:
        return None
    return parts


def _canonical_netloc(parts: SplitResult) -> str:
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"

    userinfo = ""
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        userinfo = f"{userinfo}@"

    port = parts.port
    if port is not None and _DEFAULT_PORTS.get(parts.scheme.lower()) != port:
        return f"{userinfo}{host}:{port}"
    return f"{userinfo}{host}"


def _filter_query(query: str) -> str:
    pairs = [pair for pair in query.split("&") if pair]
    kept: List[str] = []
    for pair in pairs:
        name = unquote_plus(pair.split("=", 1)[0])
        if is_tracking_param(name) and not is_functional_param(name):
            continue
        kept.append(pair)
    if len(kept) == len(pairs):
        return "&".join(kept)
    # Removing a parameter re-serializes the survivors in form encoding.
    return urlencode(parse_qsl("&".join(kept), keep_blank_values=True))


def _strip_trailing_slash(path: str) -> str:
    if path != "/" and path.endswith("/"):
        return path[:-1]
    return path


def normalize(raw_url: str) -> Tuple[str, str]:
    """Return ``(cleaned_url, domain)`` for a submitted URL.

    Unparseable input is returned unchanged with the ``"unknown"`` domain;
    this function never raises.
    """
    candidate = raw_url.strip()
    parts = _parse_absolute(candidate)
    if parts is None:
        logger.debug("URL could not be parsed", url=raw_url)
        return raw_url, UNKNOWN_DOMAIN

    scheme = parts.scheme.lower()
    path = parts.path
    if not path and scheme in _SPECIAL_SCHEMES:
        path = "/"
    path = _strip_trailing_slash(path)

    cleaned = urlunsplit(
        (scheme, _canonical_netloc(parts), path, _filter_query(parts.query), parts.fragment)
    )
    return cleaned, extract_domain(cleaned)


def clean_url(raw_url: str) -> str:
    """Return only the canonical form of ``raw_url``."""
    return normalize(raw_url)[0]


def extract_domain(url: str) -> str:
    """Return the lowercase hostname of ``url`` or ``"unknown"``."""
    parts = _parse_absolute(url.strip())
    if parts is None:
        return UNKNOWN_DOMAIN
    return parts.hostname or UNKNOWN_DOMAIN


def is_valid_url(url: Optional[str]) -> bool:
    """Return True if ``url`` parses as an absolute URL with a host."""
    if not url or not url.strip():
        return False
    return _parse_absolute(url.strip()) is not None


__all__ = [
    "FUNCTIONAL_PARAMS",
    "TRACKING_PARAMS",
    "UNKNOWN_DOMAIN",
    "classify_parameter",
    "clean_url",
    "extract_domain",
    "is_functional_param",
    "is_tracking_param",
    "is_valid_url",
    "normalize",
]
