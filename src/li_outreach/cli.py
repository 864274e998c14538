"""Command-line access to the scrape pipeline and the lead store.

Examples:
  li-outreach parse saved_search.html
  li-outreach scrape --url "https://www.linkedin.com/search/results/people/?keywords=founder" --all
  li-outreach export --out leads.csv
  li-outreach stats
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from .config import BASE_URL, DEBUG_HTML_DIR, MAX_SCROLL_STEPS, SCROLL_DELAY, ensure_dirs
from .daily_stats import DailyCounter
from .kv_store import SqliteKeyValueStore
from .logging_setup import configure_logging
from .models import Request, RequestType, ScrollStrategy
from .settings_store import SettingsStore
from .storage import LeadStore

logger = logging.getLogger(__name__)


def _stores(db_path: str | None) -> tuple[LeadStore, DailyCounter, SettingsStore]:
    kv = SqliteKeyValueStore(db_path)
    settings = SettingsStore(kv)
    return LeadStore(kv), DailyCounter(kv, settings), settings


def cmd_parse(path: str, *, url: str, store: bool, db_path: str | None = None) -> int:
    from scrapling.parser import Adaptor

    from .parsers.search_parser import parse_search_results

    file = Path(path)
    if not file.exists():
        print(f"No HTML file at {file}.")
        return 1

    page = Adaptor(file.read_text(encoding="utf-8"), url=url)
    leads = parse_search_results(page)
    print(f"Parsed {len(leads)} leads from {file.name}:")
    for i, lead in enumerate(leads, 1):
        print(f"\n  {i}. {lead.full_name} ({lead.connection_degree})")
        print(f"     URL:      {lead.profile_url}")
        print(f"     Headline: {lead.headline}")
        print(f"     Company:  {lead.company}")
        print(f"     Location: {lead.location}")

    if store and leads:
        lead_store, _, _ = _stores(db_path)
        saved = asyncio.run(lead_store.save_many(leads))
        print(f"\nStored {saved.stored}, updated {saved.updated}, errors {saved.errors}.")
    return 0


async def _scrape_async(args: argparse.Namespace) -> dict | None:
    from .browser import BrowserSession
    from .browser_lock import browser_lock
    from .pipeline import ScrapePipeline

    lead_store, counter, settings = _stores(args.db)
    await settings.init()
    session = BrowserSession(headless=args.headless)
    try:
        async with browser_lock:
            page = await session.open(args.url)
            if args.save_html:
                DEBUG_HTML_DIR.mkdir(parents=True, exist_ok=True)
                html_path = DEBUG_HTML_DIR / "last_page.html"
                html_path.write_text(await page.content(), encoding="utf-8")
                logger.info("Debug HTML saved to %s", html_path)
            pipeline = ScrapePipeline(page, lead_store, counter)
            if args.all:
                return await pipeline.scrape_all_pages(
                    max_scrolls=args.max_scrolls,
                    scroll_delay=args.scroll_delay,
                    target_count=args.target,
                    strategy=ScrollStrategy(args.strategy),
                )
            return await pipeline.handle(Request(type=RequestType.scrape_page.value))
    finally:
        await session.close()


def cmd_scrape(args: argparse.Namespace) -> int:
    result = asyncio.run(_scrape_async(args)) or {}
    if not result.get("success"):
        print(f"Scrape failed: {result.get('error', 'unknown error')}")
        return 1
    print(f"Found {result['count']} leads ({result['stored']} new, {result['updated']} updated).")
    if "scroll_info" in result:
        info = result["scroll_info"]
        print(f"Scrolled {info['scroll_count']} times, stop reason: {info['reason']}")
    print(f"Scraped today: {result['daily_stats']['scraped_today']}")
    return 0


def cmd_leads(limit: int, db_path: str | None = None) -> int:
    lead_store, _, _ = _stores(db_path)
    leads = asyncio.run(lead_store.get_all())
    print(f"{len(leads)} leads stored.")
    for lead in leads[:limit]:
        print(f"  [{lead.status}] {lead.full_name} - {lead.headline} ({lead.location})")
        if lead.profile_url:
            print(f"     {lead.profile_url}")
    return 0


def cmd_export(out: str, db_path: str | None = None) -> int:
    lead_store, _, _ = _stores(db_path)
    if not out:
        print(asyncio.run(lead_store.export_csv()), end="")
        return 0
    path = Path(out)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(asyncio.run(lead_store.export_csv(bom=True)), encoding="utf-8")
    print(f"Exported {asyncio.run(lead_store.count())} leads to {path}")
    return 0


def cmd_stats(db_path: str | None = None) -> int:
    lead_store, counter, _ = _stores(db_path)

    async def run() -> dict:
        today = await counter.get_today()
        limit = await counter.check_limit()
        return {"total_leads": await lead_store.count(), "today": today.model_dump(), "limit": limit.model_dump()}

    print(json.dumps(asyncio.run(run()), indent=2))
    return 0


def cmd_clear(yes: bool, db_path: str | None = None) -> int:
    if not yes:
        print("Refusing to clear leads without --yes.")
        return 1
    lead_store, _, _ = _stores(db_path)
    asyncio.run(lead_store.clear_all())
    print("All leads cleared.")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="li-outreach",
        description="Extract LinkedIn search results into a local lead store.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--debug", action="store_true", help="Verbose (DEBUG) logging.")
    parser.add_argument("--db", default=None, help="Path to the SQLite store (default: app data dir).")
    sub = parser.add_subparsers(dest="command")

    parse = sub.add_parser("parse", help="Extract leads from a saved search results HTML file.")
    parse.add_argument("path", help="HTML file saved from a people search page.")
    parse.add_argument(
        "--url",
        default=f"{BASE_URL}/search/results/people/",
        help="Page URL used to resolve relative profile links.",
    )
    parse.add_argument("--store", action="store_true", help="Merge parsed leads into the store.")

    scrape = sub.add_parser("scrape", help="Open a search page in the browser and extract leads.")
    scrape.add_argument("--url", required=True, help="LinkedIn people search URL.")
    scrape.add_argument("--all", action="store_true", help="Auto-scroll to reveal more results first.")
    scrape.add_argument("--max-scrolls", type=int, default=MAX_SCROLL_STEPS, help="Max scroll steps (1-100).")
    scrape.add_argument("--scroll-delay", type=float, default=SCROLL_DELAY, help="Seconds to wait per step.")
    scrape.add_argument("--target", type=int, default=None, help="Stop scrolling at this many results.")
    scrape.add_argument(
        "--strategy",
        choices=[s.value for s in ScrollStrategy],
        default=ScrollStrategy.graduated.value,
        help="jump: straight to bottom; graduated: small steps (default).",
    )
    scrape.add_argument("--headless", action="store_true", help="Run the browser headless.")
    scrape.add_argument("--save-html", action="store_true", help="Save the page HTML before extraction.")

    leads = sub.add_parser("leads", help="List stored leads, newest first.")
    leads.add_argument("--limit", type=int, default=50, help="Max leads to print.")

    export = sub.add_parser("export", help="Export stored leads as CSV.")
    export.add_argument("--out", default="", help="Output file (default: stdout).")

    sub.add_parser("stats", help="Show lead total and today's count against the daily limit.")

    clear = sub.add_parser("clear", help="Delete all stored leads.")
    clear.add_argument("--yes", action="store_true", help="Confirm deletion.")

    return parser


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    configure_logging(debug=args.debug, log_file=False)
    ensure_dirs()

    if not args.command:
        parser.print_help()
        return

    if args.command == "parse":
        raise SystemExit(cmd_parse(args.path, url=args.url, store=args.store, db_path=args.db))
    if args.command == "scrape":
        args.max_scrolls = max(1, min(int(args.max_scrolls), 100))
        raise SystemExit(cmd_scrape(args))
    if args.command == "leads":
        raise SystemExit(cmd_leads(max(1, args.limit), db_path=args.db))
    if args.command == "export":
        raise SystemExit(cmd_export(args.out, db_path=args.db))
    if args.command == "stats":
        raise SystemExit(cmd_stats(db_path=args.db))
    if args.command == "clear":
        raise SystemExit(cmd_clear(args.yes, db_path=args.db))

    parser.print_help()
