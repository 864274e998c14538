"""Tests for the LeadStore."""

import asyncio

import pytest

from li_outreach.config import LEADS_KEY
from li_outreach.fingerprint import generate_hash
from li_outreach.models import Lead
from li_outreach.storage import LeadStore, merge_lead


def _make_lead(name="John Doe", url="https://www.linkedin.com/in/john-doe", **kw):
    first, _, last = name.partition(" ")
    defaults = dict(
        first_name=first,
        last_name=last,
        full_name=name,
        headline="Engineer at Acme",
        company="Acme",
        location="SF",
        profile_url=url,
        connection_degree="2nd",
    )
    defaults.update(kw)
    return Lead(**defaults)


class _CountingKV:
    """Wraps a store and counts writes."""

    def __init__(self, inner):
        self.inner = inner
        self.sets = 0

    async def get(self, key):
        return await self.inner.get(key)

    async def set(self, key, value):
        self.sets += 1
        await self.inner.set(key, value)

    async def remove(self, key):
        await self.inner.remove(key)


class _FailingWriteKV(_CountingKV):
    async def set(self, key, value):
        raise OSError("disk full")


@pytest.fixture
def store(kv):
    return LeadStore(kv)


def test_save_one_assigns_fingerprint_id(store):
    assert asyncio.run(store.save_one(_make_lead())) is True
    leads = asyncio.run(store.get_all())
    assert len(leads) == 1
    assert leads[0].id == generate_hash("https://www.linkedin.com/in/john-doe")
    assert leads[0].status == "new"
    assert leads[0].scraped_at is not None


def test_save_one_without_url_gets_random_id(store):
    asyncio.run(store.save_one(Lead(full_name="No Url")))
    lead = asyncio.run(store.get_all())[0]
    assert lead.id
    assert len(lead.id) == 32


def test_save_one_deduplicates_by_url(store):
    assert asyncio.run(store.save_one(_make_lead(headline="Engineer at Acme"))) is True
    assert asyncio.run(store.save_one(_make_lead(headline="Senior Engineer at Acme"))) is False
    leads = asyncio.run(store.get_all())
    assert len(leads) == 1
    assert leads[0].headline == "Senior Engineer at Acme"
    assert leads[0].updated_at is not None


def test_partial_merge_keeps_unspecified_fields(store):
    asyncio.run(store.save_many([_make_lead(scraped_at=1_700_000_000_000)]))
    lead_id = generate_hash("https://www.linkedin.com/in/john-doe")

    assert asyncio.run(store.save_one({"id": lead_id, "status": "contacted"})) is False

    lead = asyncio.run(store.get(lead_id))
    assert lead.status == "contacted"
    assert lead.updated_at is not None
    assert lead.full_name == "John Doe"
    assert lead.headline == "Engineer at Acme"
    assert lead.company == "Acme"
    assert lead.connection_degree == "2nd"
    assert lead.scraped_at == 1_700_000_000_000


def test_resaving_scraped_lead_does_not_reset_status(store):
    asyncio.run(store.save_one(_make_lead()))
    lead_id = generate_hash("https://www.linkedin.com/in/john-doe")
    asyncio.run(store.save_one({"id": lead_id, "status": "contacted"}))

    # A fresh extraction of the same profile carries no status
    asyncio.run(store.save_one(_make_lead(headline="CTO at Acme")))
    asyncio.run(store.save_many([_make_lead(headline="CEO at Acme")]))

    lead = asyncio.run(store.get(lead_id))
    assert lead.status == "contacted"
    assert lead.headline == "CEO at Acme"


def test_save_many_counts_stored_and_updated(store):
    first = asyncio.run(store.save_many([
        _make_lead(name="Alice A", url="https://www.linkedin.com/in/alice"),
        _make_lead(name="Bob B", url="https://www.linkedin.com/in/bob"),
    ]))
    assert (first.stored, first.updated, first.errors) == (2, 0, 0)

    second = asyncio.run(store.save_many([
        _make_lead(name="Bob B", url="https://www.linkedin.com/in/bob"),
        _make_lead(name="Carl C", url="https://www.linkedin.com/in/carl"),
    ]))
    assert (second.stored, second.updated, second.errors) == (1, 1, 0)
    assert asyncio.run(store.count()) == 3


def test_save_many_preserves_incoming_scraped_at_and_status(store):
    asyncio.run(store.save_many([_make_lead(scraped_at=123, status="replied")]))
    lead = asyncio.run(store.get_all())[0]
    assert lead.scraped_at == 123
    assert lead.status == "replied"


def test_save_many_isolates_bad_records(kv):
    counting = _CountingKV(kv)
    store = LeadStore(counting)
    stats = asyncio.run(store.save_many([
        _make_lead(name="Alice A", url="https://www.linkedin.com/in/alice"),
        {"profile_url": "https://www.linkedin.com/in/bad", "scraped_at": "yesterday"},
        _make_lead(name="Bob B", url="https://www.linkedin.com/in/bob"),
    ]))
    assert (stats.stored, stats.updated, stats.errors) == (2, 0, 1)
    assert counting.sets == 1
    names = {lead.full_name for lead in asyncio.run(store.get_all())}
    assert names == {"Alice A", "Bob B"}


def test_save_one_failure_propagates(kv):
    store = LeadStore(_FailingWriteKV(kv))
    with pytest.raises(OSError):
        asyncio.run(store.save_one(_make_lead()))


def test_get_all_sorted_newest_first(store):
    asyncio.run(store.save_many([
        _make_lead(name="Old One", url="https://www.linkedin.com/in/old", scraped_at=1000),
        _make_lead(name="New One", url="https://www.linkedin.com/in/new", scraped_at=3000),
        _make_lead(name="Mid One", url="https://www.linkedin.com/in/mid", scraped_at=2000),
    ]))
    assert [l.full_name for l in asyncio.run(store.get_all())] == ["New One", "Mid One", "Old One"]


def test_clear_all(store, kv):
    asyncio.run(store.save_one(_make_lead()))
    asyncio.run(store.clear_all())
    assert asyncio.run(store.get_all()) == []
    assert asyncio.run(kv.get(LEADS_KEY)) is None


def test_export_csv(store):
    asyncio.run(store.save_one(_make_lead()))
    csv_data = asyncio.run(store.export_csv())
    assert csv_data.startswith("FirstName,LastName,Headline")
    assert asyncio.run(store.export_csv(bom=True)).startswith("\ufeffFirstName")
    assert "https://www.linkedin.com/in/john-doe" in csv_data


def test_merge_lead_precedence():
    existing = {"id": "x", "status": "new", "headline": "A", "location": "SF"}
    merged = merge_lead(existing, {"id": "x", "headline": "", "status": "contacted"}, now=42)
    assert merged == {"id": "x", "status": "contacted", "headline": "", "location": "SF", "updated_at": 42}
    assert existing["status"] == "new"
