"""Request handling: reveal, extract, merge into the store, count."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .auto_scroller import AutoScroller
from .config import (
    PEOPLE_SEARCH_FRAGMENT,
    POST_SCROLL_DELAY,
    PRE_SCRAPE_DELAY,
    SEARCH_RESULTS_FRAGMENT,
)
from .daily_stats import DailyCounter
from .models import Lead, Request, RequestType, ScrollStrategy
from .page import PageDriver, count_containers, snapshot
from .parsers.search_parser import parse_search_results
from .storage import LeadStore

logger = logging.getLogger(__name__)

UNSUPPORTED_PAGE = "Not a supported page for scraping"


class ScrapePipeline:
    """Answers one typed request against one page.

    Runs are not re-entrant; callers must not start a second request on the
    same page while one is in flight.
    """

    def __init__(
        self,
        page: PageDriver,
        store: LeadStore,
        counter: DailyCounter,
        *,
        scroller: AutoScroller | None = None,
        pre_scrape_delay: tuple[float, float] = PRE_SCRAPE_DELAY,
        post_scroll_delay: tuple[float, float] = POST_SCROLL_DELAY,
        log: logging.Logger | None = None,
    ) -> None:
        self.page = page
        self.store = store
        self.counter = counter
        self._log = log or logger
        self.scroller = scroller or AutoScroller(page, log=self._log)
        self.pre_scrape_delay = pre_scrape_delay
        self.post_scroll_delay = post_scroll_delay

    async def handle(self, request: Request | Mapping[str, Any]) -> dict | None:
        """Dispatch a request; unknown or untyped requests get no response."""
        fields = request.model_dump() if isinstance(request, Request) else dict(request)
        try:
            kind = RequestType(fields.get("type"))
        except ValueError:
            self._log.debug("Ignoring request of type %r", fields.get("type"))
            return None
        if not isinstance(request, Request):
            try:
                request = Request.model_validate(fields)
            except ValidationError as exc:
                self._log.warning("Rejected %s request: %s", kind.value, exc)
                return {"success": False, "error": str(exc)}

        if kind is RequestType.scrape_page:
            return await self.scrape_page()
        if kind is RequestType.scrape_all_pages:
            return await self.scrape_all_pages(
                max_scrolls=request.max_scrolls,
                scroll_delay=request.scroll_delay,
                target_count=request.target_count,
            )
        if kind is RequestType.get_page_stats:
            return await self.page_stats()
        return (await self.counter.check_limit()).model_dump()

    def _on_search_page(self) -> bool:
        return SEARCH_RESULTS_FRAGMENT in self.page.url

    async def _human_pause(self, bounds: tuple[float, float]) -> None:
        delay = random.uniform(*bounds)
        self._log.info("Waiting %dms before extraction", round(delay * 1000))
        await asyncio.sleep(delay)

    async def _extract_and_store(self) -> dict:
        leads: list[Lead] = parse_search_results(await snapshot(self.page), log=self._log)
        saved = await self.store.save_many(leads)
        if leads:
            try:
                await self.counter.increment(len(leads))
            except Exception:
                self._log.error("Failed to increment today count", exc_info=True)
        stats = await self.counter.get_today()
        return {
            "success": True,
            "count": len(leads),
            "leads": [lead.model_dump(mode="json") for lead in leads],
            "stored": saved.stored,
            "updated": saved.updated,
            "daily_stats": {"scraped_today": stats.count},
        }

    async def scrape_page(self) -> dict:
        try:
            if not self._on_search_page():
                return {"success": False, "error": UNSUPPORTED_PAGE}
            await self._human_pause(self.pre_scrape_delay)
            return await self._extract_and_store()
        except Exception as exc:
            self._log.error("Scrape request failed", exc_info=True)
            return {"success": False, "error": str(exc)}

    async def scrape_all_pages(
        self,
        *,
        max_scrolls: int,
        scroll_delay: float,
        target_count: int | None = None,
        strategy: ScrollStrategy = ScrollStrategy.graduated,
    ) -> dict:
        try:
            if not self._on_search_page():
                return {"success": False, "error": UNSUPPORTED_PAGE}

            self._log.info("Starting auto-scroll + batch scrape")
            reveal = await self.scroller.scroll(
                max_steps=max_scrolls,
                step_delay=scroll_delay,
                target_count=target_count,
                strategy=strategy,
            )
            if not reveal.success:
                return {"success": False, "error": f"Auto-scroll failed: {reveal.error}"}

            self._log.info("Auto-scroll loaded %d containers", reveal.records_visible)
            await self._human_pause(self.post_scroll_delay)
            response = await self._extract_and_store()
            response["scroll_info"] = {
                "scroll_count": reveal.steps_taken,
                "profiles_loaded": reveal.records_visible,
                "reason": reveal.reason.value if reveal.reason else None,
            }
            return response
        except Exception as exc:
            self._log.error("Scrape all pages failed", exc_info=True)
            return {"success": False, "error": str(exc)}

    async def page_stats(self) -> dict:
        url = self.page.url
        if PEOPLE_SEARCH_FRAGMENT in url:
            return {
                "valid_page": True,
                "profile_count": await count_containers(self.page),
                "page_type": "search_people",
            }
        if "/in/" in url:
            return {"valid_page": True, "profile_count": 1, "page_type": "profile"}
        return {"valid_page": False, "profile_count": 0, "page_type": "unknown"}
