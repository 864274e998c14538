"""Parser for LinkedIn People Search result pages."""

from __future__ import annotations

import html as html_mod
import logging
import re

from ..config import BASE_URL
from ..fingerprint import generate_hash
from ..models import Lead, LeadSource, now_ms
from .common import (
    canonicalize_profile_url,
    clean_display_name,
    clean_text,
    company_from_headline,
    extract_connection_degree,
    is_non_canonical,
    split_name,
)

logger = logging.getLogger(__name__)

# Most stable first; LinkedIn rotates class names more often than roles.
RESULT_CONTAINER_SELECTORS = [
    ("div[role='listitem']", "role=listitem"),
    (".reusable-search__result-container", "result-container class"),
    ("li.reusable-search__result-container", "li result-container"),
    ("div.entity-result", "legacy entity-result"),
]

PROFILE_LINK_SELECTORS = [
    "a[data-view-name='search-result-lockup-title']",
    "a[href*='/in/']",
]

LEGACY_HEADLINE_SELECTORS = [".entity-result__primary-subtitle", ".entity-result__summary"]
LEGACY_LOCATION_SELECTORS = [".entity-result__secondary-subtitle"]


def _css_first(el: object, selector: str) -> object | None:
    """Safe css_first that works on both Adaptor and Selector objects."""
    if hasattr(el, "css_first"):
        return el.css_first(selector)
    results = el.css(selector)
    return results[0] if results else None


def _full_text(el: object) -> str:
    """Flattened text of an element including its children (DOM textContent)."""
    if hasattr(el, "html_content"):
        raw = el.html_content
        if isinstance(raw, str):
            return html_mod.unescape(re.sub(r"<[^>]+>", "", raw)).strip()
    if hasattr(el, "get_all_text"):
        return el.get_all_text().strip()
    return (el.text or "").strip()


def _closest(el: object, tag: str) -> object | None:
    """Nearest ancestor with the given tag name."""
    node = getattr(el, "parent", None)
    while node is not None:
        if getattr(node, "tag", None) == tag:
            return node
        node = getattr(node, "parent", None)
    return None


def _first_match(el: object, selectors: list[str]) -> object | None:
    for selector in selectors:
        found = _css_first(el, selector)
        if found is not None:
            return found
    return None


def _first_text(el: object, selectors: list[str]) -> str:
    """Text of the first selector match that is not empty."""
    for selector in selectors:
        found = _css_first(el, selector)
        text = clean_text(_full_text(found)) if found is not None else None
        if text:
            return text
    return ""


def find_result_containers(page: object) -> list:
    """Return containers for the first selector in the chain that matches."""
    for selector, name in RESULT_CONTAINER_SELECTORS:
        containers = page.css(selector)
        if containers:
            logger.info("Matched %d result containers via: %s", len(containers), name)
            return list(containers)
        logger.debug("Container strategy '%s' matched 0", name)
    return []


def parse_search_results(page: object, *, log: logging.Logger | None = None) -> list[Lead]:
    """Extract leads from a LinkedIn People Search results page.

    Never raises: a broken container is skipped, a broken page yields [].
    """
    log = log or logger
    leads: list[Lead] = []
    try:
        containers = find_result_containers(page)
        if not containers:
            log.warning("No result containers found; LinkedIn may have changed its markup")
            return []

        base_url = str(getattr(page, "url", "") or "") or BASE_URL
        for container in containers:
            try:
                lead = parse_container(container, base_url=base_url)
                if lead:
                    leads.append(lead)
            except Exception:
                log.warning("Failed to parse a search result container", exc_info=True)
    except Exception:
        log.error("Search results extraction failed", exc_info=True)
        return []

    log.info("Extracted %d leads", len(leads))
    return leads


def parse_container(container: object, *, base_url: str = BASE_URL) -> Lead | None:
    """Parse one result container into a Lead, or None if it has no usable link/name."""
    link = _first_match(container, PROFILE_LINK_SELECTORS)
    if link is None:
        logger.debug("Container skipped: no profile link")
        return None

    profile_url = canonicalize_profile_url(link.attrib.get("href"), base_url)
    if not profile_url or is_non_canonical(profile_url):
        return None

    full_name = clean_display_name(_full_text(link))
    if not full_name:
        logger.debug("Container skipped: empty name for %s", profile_url)
        return None
    first_name, last_name = split_name(full_name)

    title_paragraph = _closest(link, "p")
    connection_degree = None
    if title_paragraph is not None:
        connection_degree = extract_connection_degree(_full_text(title_paragraph))

    # Title block: p[0] name + degree, p[1] headline, p[2] location
    headline = ""
    location = ""
    title_block = _closest(link, "div")
    if title_block is not None:
        paragraphs = title_block.css("p") or []
        if len(paragraphs) >= 2:
            headline = clean_text(_full_text(paragraphs[1])) or ""
        if len(paragraphs) >= 3:
            location = clean_text(_full_text(paragraphs[2])) or ""

    if not headline:
        headline = _first_text(container, LEGACY_HEADLINE_SELECTORS)
    if not location:
        location = _first_text(container, LEGACY_LOCATION_SELECTORS)

    return Lead(
        id=generate_hash(profile_url),
        first_name=first_name,
        last_name=last_name,
        full_name=full_name,
        headline=headline,
        company=company_from_headline(headline),
        location=location,
        profile_url=profile_url,
        connection_degree=connection_degree or "N/A",
        source=LeadSource.search_result,
        scraped_at=now_ms(),
    )


def parse_profile_page(page: object) -> Lead | None:
    """Deep profile extraction is not supported; always None."""
    return None
