"""User settings persisted in the key-value store."""

from __future__ import annotations

import logging

from .config import SETTINGS_KEY
from .kv_store import KeyValueStore
from .models import Settings

logger = logging.getLogger(__name__)


class SettingsStore:
    def __init__(self, kv: KeyValueStore, *, log: logging.Logger | None = None) -> None:
        self._kv = kv
        self._log = log or logger

    async def init(self) -> None:
        """Write default settings on first run."""
        try:
            if await self._kv.get(SETTINGS_KEY) is None:
                await self._kv.set(SETTINGS_KEY, Settings().model_dump(mode="json"))
                self._log.info("Initialized default settings")
        except Exception:
            self._log.error("Failed to initialize settings", exc_info=True)

    async def get(self) -> Settings:
        try:
            raw = await self._kv.get(SETTINGS_KEY)
        except Exception:
            self._log.error("Failed to get settings", exc_info=True)
            return Settings()
        if not isinstance(raw, dict):
            return Settings()
        return Settings.model_validate(raw)

    async def save(self, settings: Settings) -> None:
        await self._kv.set(SETTINGS_KEY, settings.model_dump(mode="json"))
        self._log.info("Settings saved")
