"""Persistent browser session used to render LinkedIn result pages."""

from __future__ import annotations

import logging

from .config import SESSIONS_DIR, ensure_dirs
from .page import PatchrightPage

logger = logging.getLogger(__name__)


class BrowserSession:
    """Keeps one Chromium page open on a persistent profile.

    The profile directory keeps the LinkedIn login across runs; log in once
    in the headed window and later sessions reuse the cookies.
    """

    def __init__(self, user_data_dir: str | None = None, *, headless: bool = False) -> None:
        ensure_dirs()
        self.user_data_dir = user_data_dir or str(SESSIONS_DIR)
        self.headless = headless
        self._pw = None
        self._context = None
        self._page = None

    @property
    def is_open(self) -> bool:
        return self._page is not None

    @property
    def page(self) -> PatchrightPage:
        if self._page is None:
            raise RuntimeError("Browser session is not open")
        return PatchrightPage(self._page)

    async def open(self, url: str | None = None) -> PatchrightPage:
        from patchright.async_api import async_playwright

        if self._page is None:
            self._pw = await async_playwright().start()
            self._context = await self._pw.chromium.launch_persistent_context(
                user_data_dir=self.user_data_dir,
                channel="chrome",
                headless=self.headless,
                viewport={"width": 1280, "height": 900},
                args=[
                    "--disable-blink-features=AutomationControlled",
                    "--no-first-run",
                    "--no-default-browser-check",
                ],
            )
            pages = self._context.pages
            self._page = pages[0] if pages else await self._context.new_page()
            logger.info("Browser session opened (profile: %s)", self.user_data_dir)

        if url:
            await self._page.goto(url, wait_until="domcontentloaded")
            logger.info("Navigated to %s", url)
        return self.page

    async def close(self) -> None:
        try:
            if self._context is not None:
                await self._context.close()
            if self._pw is not None:
                await self._pw.stop()
        finally:
            self._pw = self._context = self._page = None
            logger.info("Browser session closed")
