"""Per-day scrape counter with lazy rollover."""

from __future__ import annotations

import logging

from .config import DEFAULT_DAILY_LIMIT, STATS_KEY
from .kv_store import KeyValueStore
from .models import DailyStats, LimitCheck, now_ms, today_str
from .settings_store import SettingsStore

logger = logging.getLogger(__name__)


class DailyCounter:
    """Counts leads scraped per calendar day (UTC).

    A record stored under an older date reads as zero for today; storage is
    only rewritten on the next ``increment``.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        settings: SettingsStore,
        *,
        log: logging.Logger | None = None,
    ) -> None:
        self._kv = kv
        self._settings = settings
        self._log = log or logger

    async def get_today(self) -> DailyStats:
        today = today_str()
        try:
            raw = await self._kv.get(STATS_KEY)
        except Exception:
            self._log.error("Failed to get today stats", exc_info=True)
            return DailyStats(date=today)
        if not isinstance(raw, dict) or raw.get("date") != today:
            return DailyStats(date=today)
        return DailyStats.model_validate(raw)

    async def increment(self, n: int) -> DailyStats:
        stats = await self.get_today()
        updated = DailyStats(date=today_str(), count=stats.count + n, last_scrape_time=now_ms())
        await self._kv.set(STATS_KEY, updated.model_dump(mode="json"))
        self._log.info("Today's scrape count: %d", updated.count)
        return updated

    async def check_limit(self) -> LimitCheck:
        """Advisory view of today's quota; nothing blocks on it."""
        try:
            settings = await self._settings.get()
            stats = await self.get_today()
        except Exception:
            self._log.error("Failed to check daily limit", exc_info=True)
            return LimitCheck(
                can_scrape=True,
                remaining=DEFAULT_DAILY_LIMIT,
                limit=DEFAULT_DAILY_LIMIT,
                scraped_today=0,
            )
        limit = settings.daily_profile_visit_limit or DEFAULT_DAILY_LIMIT
        return LimitCheck(
            can_scrape=stats.count < limit,
            remaining=max(0, limit - stats.count),
            limit=limit,
            scraped_today=stats.count,
        )
