"""Access to a rendered page: markup, visible text, scrolling."""

from __future__ import annotations

from typing import Protocol

from scrapling.parser import Adaptor

from .parsers.search_parser import RESULT_CONTAINER_SELECTORS


class PageAccessError(RuntimeError):
    """The rendered page could not be read or scrolled."""


class PageDriver(Protocol):
    @property
    def url(self) -> str: ...

    async def content(self) -> str: ...

    async def visible_text(self) -> str: ...

    async def scroll_height(self) -> int: ...

    async def scroll_to(self, y: int) -> None: ...

    async def scroll_by(self, dy: int) -> None: ...

    async def count(self, selector: str) -> int: ...


async def snapshot(page: PageDriver) -> Adaptor:
    """Parse the page's current markup for the extractor."""
    try:
        html = await page.content()
    except Exception as exc:
        raise PageAccessError(f"Could not read page content: {exc}") from exc
    return Adaptor(html, url=page.url)


async def count_containers(page: PageDriver) -> int:
    """Visible result containers, using the extractor's selector chain."""
    for selector, _ in RESULT_CONTAINER_SELECTORS:
        n = await page.count(selector)
        if n > 0:
            return n
    return 0


class PatchrightPage:
    """PageDriver over a patchright (Playwright) async ``Page``."""

    def __init__(self, page: object) -> None:
        self._page = page

    @property
    def url(self) -> str:
        return str(getattr(self._page, "url", "") or "")

    async def content(self) -> str:
        return await self._page.content()

    async def visible_text(self) -> str:
        return await self._page.evaluate("document.body ? document.body.innerText : ''")

    async def scroll_height(self) -> int:
        return int(await self._page.evaluate("document.documentElement.scrollHeight"))

    async def scroll_to(self, y: int) -> None:
        await self._page.evaluate("(y) => window.scrollTo({top: y, behavior: 'smooth'})", y)

    async def scroll_by(self, dy: int) -> None:
        await self._page.evaluate("(dy) => window.scrollBy({top: dy, behavior: 'smooth'})", dy)

    async def count(self, selector: str) -> int:
        try:
            return await self._page.locator(selector).count()
        except Exception as exc:
            raise PageAccessError(f"Could not count {selector!r}: {exc}") from exc
