"""CSV export and import of stored leads."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import datetime, timezone

from .models import DEFAULT_STATUS, Lead

CSV_HEADERS = [
    "FirstName",
    "LastName",
    "Headline",
    "Company",
    "Location",
    "ProfileURL",
    "Status",
    "ConnectionDeg",
    "ScrapedAt",
    "Notes",
]

# Excel needs the BOM to detect UTF-8
BOM = "\ufeff"


def format_timestamp(ms: int | None) -> str:
    if ms is None:
        return ""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat(timespec="milliseconds")


def parse_timestamp(value: str) -> int | None:
    if not value:
        return None
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(round(dt.timestamp() * 1000))


def leads_to_csv(leads: Iterable[Lead], *, bom: bool = False) -> str:
    """Render leads as CSV; fields with a comma, quote or newline are quoted."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for lead in leads:
        writer.writerow([
            lead.first_name,
            lead.last_name,
            lead.headline,
            lead.company,
            lead.location,
            lead.profile_url or "",
            lead.status or DEFAULT_STATUS,
            lead.connection_degree,
            format_timestamp(lead.scraped_at),
            lead.notes or "",
        ])
    content = output.getvalue()
    return f"{BOM}{content}" if bom else content


def leads_from_csv(text: str) -> list[Lead]:
    """Parse CSV produced by ``leads_to_csv`` back into leads."""
    reader = csv.DictReader(io.StringIO(text.removeprefix(BOM)))
    leads: list[Lead] = []
    for row in reader:
        first = row.get("FirstName", "")
        last = row.get("LastName", "")
        leads.append(
            Lead(
                first_name=first,
                last_name=last,
                full_name=" ".join(p for p in (first, last) if p),
                headline=row.get("Headline", ""),
                company=row.get("Company", ""),
                location=row.get("Location", ""),
                profile_url=row.get("ProfileURL") or None,
                status=row.get("Status") or DEFAULT_STATUS,
                connection_degree=row.get("ConnectionDeg") or "N/A",
                scraped_at=parse_timestamp(row.get("ScrapedAt", "")),
                notes=row.get("Notes") or None,
            )
        )
    return leads
