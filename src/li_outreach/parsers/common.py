"""Shared text cleaning and field derivation helpers."""

from __future__ import annotations

import re
from urllib.parse import urljoin

_DEGREE_RE = re.compile(r"•\s*(\d+(?:st|nd|rd|th)\+?)")
_NON_CANONICAL_FRAGMENTS = ("/miniprofile/",)
_COMPANY_SEPARATORS = (" at ", " | ")


def clean_text(text: str | None) -> str | None:
    """Strip whitespace, collapse internal runs, remove zero-width chars."""
    if not text:
        return None
    text = re.sub(r"[\u200b\u200c\u200d\ufeff]", "", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text or None


def canonicalize_profile_url(url: str | None, base_url: str | None = None) -> str | None:
    """Resolve ``url`` against ``base_url`` and drop the query string.

    A trailing ``#fragment`` is dropped as well; profile links never need one.
    """
    if not url:
        return None
    url = url.strip()
    if base_url:
        url = urljoin(base_url, url)
    url = url.split("?")[0].split("#")[0]
    return url or None


def is_non_canonical(url: str) -> bool:
    return any(frag in url for frag in _NON_CANONICAL_FRAGMENTS)


def clean_display_name(text: str | None) -> str:
    """Cut the name at the degree bullet and collapse whitespace."""
    if not text:
        return ""
    name = text.split("•")[0]
    return clean_text(name) or ""


def split_name(name: str) -> tuple[str, str]:
    """Split 'First Rest Of Name' into (first, rest)."""
    parts = name.split(" ")
    first = parts[0] or "Unknown"
    last = " ".join(parts[1:]) if len(parts) > 1 else ""
    return first, last


def extract_connection_degree(text: str | None) -> str | None:
    """Extract '1st', '2nd', '3rd+' etc. from text like 'Jane Doe • 2nd'."""
    if not text:
        return None
    m = _DEGREE_RE.search(text)
    return m.group(1) if m else None


def company_from_headline(headline: str | None) -> str:
    """Best-effort company from 'Title at Company' or 'Title | Company'.

    The trailing segment wins when the separator appears more than once.
    """
    if not headline:
        return ""
    for sep in _COMPANY_SEPARATORS:
        if sep in headline:
            return headline.split(sep)[-1].strip()
    return ""
