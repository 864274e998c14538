"""FastAPI application: request/response surface over the scrape pipeline."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from fastapi import FastAPI
from fastapi.responses import Response
from pydantic import BaseModel

from .browser import BrowserSession
from .browser_lock import browser_lock
from .config import HOST, PORT
from .daily_stats import DailyCounter
from .kv_store import SqliteKeyValueStore
from .logging_setup import configure_logging
from .models import Request, Settings
from .pipeline import ScrapePipeline
from .settings_store import SettingsStore
from .storage import LeadStore

logger = logging.getLogger(__name__)

# Singletons, created on first use
_kv: SqliteKeyValueStore | None = None
_session: BrowserSession | None = None


def _get_kv() -> SqliteKeyValueStore:
    global _kv
    if _kv is None:
        _kv = SqliteKeyValueStore()
    return _kv


def _get_session() -> BrowserSession:
    global _session
    if _session is None:
        _session = BrowserSession()
    return _session


def _get_store() -> LeadStore:
    return LeadStore(_get_kv())


def _get_settings() -> SettingsStore:
    return SettingsStore(_get_kv())


def _get_counter() -> DailyCounter:
    return DailyCounter(_get_kv(), _get_settings())


@asynccontextmanager
async def lifespan(_: FastAPI):
    await _get_settings().init()
    yield
    if _session is not None and _session.is_open:
        await _session.close()


app = FastAPI(title="LinkedIn Outreach", version="0.1.0", lifespan=lifespan)


class OpenSessionBody(BaseModel):
    url: str | None = None


# ── Session ───────────────────────────────────────────────────────────────

@app.post("/api/session/open")
async def open_session(body: OpenSessionBody):
    session = _get_session()
    async with browser_lock:
        page = await session.open(body.url)
    return {"status": "open", "url": page.url}


@app.post("/api/session/close")
async def close_session():
    session = _get_session()
    async with browser_lock:
        await session.close()
    return {"status": "closed"}


# ── Messages ──────────────────────────────────────────────────────────────

@app.post("/api/message")
async def message(req: Request):
    """Run one pipeline request against the open page."""
    session = _get_session()
    if not session.is_open:
        return {"success": False, "error": "No browser page is open"}
    if browser_lock.locked():
        return {"success": False, "error": "A scrape is already running"}

    async with browser_lock:
        pipeline = ScrapePipeline(session.page, _get_store(), _get_counter())
        result = await pipeline.handle(req)
    if result is None:
        return Response(status_code=204)
    return result


# ── Leads ─────────────────────────────────────────────────────────────────

@app.get("/api/leads")
async def list_leads():
    leads = await _get_store().get_all()
    return {"leads": [lead.model_dump(mode="json") for lead in leads], "total": len(leads)}


@app.get("/api/leads/export")
async def export_leads():
    filename = f"linkedin_leads_{datetime.now().strftime('%Y-%m-%d')}.csv"
    return Response(
        content=await _get_store().export_csv(bom=True),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@app.post("/api/leads/clear")
async def clear_leads():
    await _get_store().clear_all()
    return {"status": "ok"}


# ── Stats + settings ──────────────────────────────────────────────────────

@app.get("/api/stats")
async def stats():
    counter = _get_counter()
    today = await counter.get_today()
    limit = await counter.check_limit()
    return {
        "total_leads": await _get_store().count(),
        "today": today.model_dump(),
        "limit": limit.model_dump(),
    }


@app.get("/api/settings")
async def get_settings():
    return (await _get_settings().get()).model_dump()


@app.put("/api/settings")
async def update_settings(body: Settings):
    await _get_settings().save(body)
    return body.model_dump()


# ── Entrypoint ────────────────────────────────────────────────────────────

def main():
    """Start the API server."""
    configure_logging()
    logger.info("Starting LinkedIn Outreach at http://%s:%d", HOST, PORT)
    uvicorn.run(app, host=HOST, port=PORT, log_level="info", log_config=None)
