"""Deduplicating lead persistence on top of the key-value store."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from .config import LEADS_KEY
from .csv_export import leads_to_csv
from .fingerprint import generate_hash
from .kv_store import KeyValueStore
from .models import DEFAULT_STATUS, Lead, SaveStats, now_ms

logger = logging.getLogger(__name__)

LeadInput = Lead | Mapping[str, Any]


def merge_lead(existing: Mapping[str, Any], incoming: Mapping[str, Any], now: int) -> dict[str, Any]:
    """Shallow merge of ``incoming`` over ``existing``.

    Field precedence:
      - a field supplied in ``incoming`` wins, even if empty
      - a field absent from ``incoming`` keeps its ``existing`` value
      - ``updated_at`` is always ``now``
    """
    merged = dict(existing)
    merged.update(incoming)
    merged["updated_at"] = now
    return merged


def assign_id(fields: dict[str, Any]) -> str:
    """Fingerprint of the profile URL, or a random id when there is none."""
    if not fields.get("id"):
        url = fields.get("profile_url")
        fields["id"] = generate_hash(url) if url else uuid.uuid4().hex
    return fields["id"]


def _supplied_fields(lead: LeadInput) -> dict[str, Any]:
    """Validated fields the caller actually supplied, JSON-ready."""
    model = lead if isinstance(lead, Lead) else Lead.model_validate(dict(lead))
    return model.model_dump(mode="json", exclude_unset=True)


def _new_record(fields: dict[str, Any], now: int) -> dict[str, Any]:
    record = Lead.model_validate(fields).model_dump(mode="json")
    if record.get("scraped_at") is None:
        record["scraped_at"] = now
    if not record.get("status"):
        record["status"] = DEFAULT_STATUS
    return record


class LeadStore:
    """Leads keyed by id, stored as one mapping under a single key."""

    def __init__(self, kv: KeyValueStore, *, log: logging.Logger | None = None) -> None:
        self._kv = kv
        self._log = log or logger

    async def _load(self) -> dict[str, dict[str, Any]]:
        return await self._kv.get(LEADS_KEY) or {}

    def _apply(self, leads: dict[str, dict[str, Any]], lead: LeadInput, now: int) -> bool:
        fields = _supplied_fields(lead)
        lead_id = assign_id(fields)
        existing = leads.get(lead_id)
        if existing is not None:
            leads[lead_id] = merge_lead(existing, fields, now)
            return False
        leads[lead_id] = _new_record(fields, now)
        return True

    async def save_one(self, lead: LeadInput) -> bool:
        """Insert or merge a single lead. Returns True when it was new.

        Failures propagate: a caller asking for one save needs to know.
        """
        try:
            leads = await self._load()
            is_new = self._apply(leads, lead, now_ms())
            await self._kv.set(LEADS_KEY, leads)
        except Exception:
            self._log.error("Failed to save lead", exc_info=True)
            raise
        self._log.info("%s lead", "Saved new" if is_new else "Updated existing")
        return is_new

    async def save_many(self, leads_in: Iterable[LeadInput]) -> SaveStats:
        """Merge a batch, isolating failures per record, then write once."""
        stats = SaveStats()
        try:
            leads = await self._load()
            now = now_ms()
            for lead in leads_in:
                try:
                    if self._apply(leads, lead, now):
                        stats.stored += 1
                    else:
                        stats.updated += 1
                except Exception:
                    self._log.warning("Skipping lead that failed to merge", exc_info=True)
                    stats.errors += 1
            await self._kv.set(LEADS_KEY, leads)
        except Exception:
            self._log.error("Failed to save batch leads", exc_info=True)
            raise
        self._log.info(
            "Batch save: %d stored, %d updated, %d errors",
            stats.stored, stats.updated, stats.errors,
        )
        return stats

    async def get_all(self) -> list[Lead]:
        """All leads, most recently scraped first."""
        try:
            leads = await self._load()
        except Exception:
            self._log.error("Failed to get leads", exc_info=True)
            return []
        records = sorted(leads.values(), key=lambda r: r.get("scraped_at") or 0, reverse=True)
        return [Lead.model_validate(r) for r in records]

    async def get(self, lead_id: str) -> Lead | None:
        record = (await self._load()).get(lead_id)
        return Lead.model_validate(record) if record else None

    async def count(self) -> int:
        return len(await self._load())

    async def clear_all(self) -> None:
        await self._kv.remove(LEADS_KEY)
        self._log.info("All leads cleared")

    async def export_csv(self, *, bom: bool = False) -> str:
        return leads_to_csv(await self.get_all(), bom=bom)
