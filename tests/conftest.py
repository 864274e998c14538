"""Shared fixtures: a temp key-value store and a scriptable fake page."""

from __future__ import annotations

import pytest

from li_outreach.kv_store import SqliteKeyValueStore

SEARCH_URL = "https://www.linkedin.com/search/results/people/?keywords=engineer"

SEARCH_HTML = """
<html><body>
<div role="list">
  <div role="listitem">
    <div>
      <p><a data-view-name="search-result-lockup-title"
            href="https://www.linkedin.com/in/jane-doe?miniProfileUrn=abc">Jane Doe</a> • 2nd</p>
      <p>Engineer at Acme Corp</p>
      <p>Toronto, Ontario, Canada</p>
    </div>
  </div>
  <div role="listitem">
    <div>
      <p><a data-view-name="search-result-lockup-title"
            href="https://www.linkedin.com/in/john-van-smith/"><span>John  van
            Smith</span></a> • 3rd+</p>
      <p>Founder | Smith &amp; Co</p>
      <p>Berlin, Germany</p>
    </div>
  </div>
  <div role="listitem">
    <div>
      <p><a href="/in/ana-lopez?trk=search">Ana Lopez</a></p>
      <p>Designer</p>
    </div>
  </div>
  <div role="listitem">
    <div>
      <p><a data-view-name="search-result-lockup-title"
            href="https://www.linkedin.com/in/miniprofile/ACoAAB">Hidden Member</a></p>
    </div>
  </div>
</div>
</body></html>
"""


class FakePage:
    """In-memory PageDriver.

    ``heights`` is the page height after N bottom jumps, ``counts`` the
    number of result containers after N reveal actions (a jump or a full
    graduated step of ``substeps`` scroll_by calls). Both clamp to their
    last value.
    """

    def __init__(
        self,
        *,
        url: str = SEARCH_URL,
        html: str = SEARCH_HTML,
        heights: list[int] | None = None,
        counts: list[int] | None = None,
        texts: list[str] | None = None,
        substeps: int = 5,
        fail_text_after: int | None = None,
    ) -> None:
        self._url = url
        self.html = html
        self.heights = heights or [1000]
        self.counts = counts or [0]
        self.texts = texts or [""]
        self.substeps = substeps
        self.fail_text_after = fail_text_after
        self.jumps = 0
        self.nudges = 0
        self.positions: list[int] = []

    @property
    def reveals(self) -> int:
        return self.jumps + self.nudges // self.substeps

    @staticmethod
    def _at(values: list, index: int):
        return values[min(index, len(values) - 1)]

    @property
    def url(self) -> str:
        return self._url

    async def content(self) -> str:
        return self.html

    async def visible_text(self) -> str:
        if self.fail_text_after is not None and self.reveals >= self.fail_text_after:
            raise RuntimeError("page detached")
        return self._at(self.texts, self.reveals)

    async def scroll_height(self) -> int:
        return self._at(self.heights, self.jumps)

    async def scroll_to(self, y: int) -> None:
        self.positions.append(y)
        if y > 0:
            self.jumps += 1

    async def scroll_by(self, dy: int) -> None:
        self.nudges += 1

    async def count(self, selector: str) -> int:
        if "listitem" not in selector:
            return 0
        return self._at(self.counts, self.reveals)


@pytest.fixture
def kv(tmp_path):
    return SqliteKeyValueStore(db_path=str(tmp_path / "test_store.db"))


@pytest.fixture
def make_page():
    return FakePage
