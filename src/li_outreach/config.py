"""Paths, storage keys and default settings."""

import os
from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "li-outreach"

DATA_DIR = Path(os.getenv("LI_OUTREACH_DATA_DIR") or user_data_dir(APP_NAME))
DB_PATH = DATA_DIR / "store.db"
SESSIONS_DIR = DATA_DIR / "sessions"
DEBUG_HTML_DIR = DATA_DIR / "debug_html"
LOG_DIR = DATA_DIR / "logs"
LOG_FILE = LOG_DIR / "li-outreach.log"
try:
    LOG_RETENTION_DAYS = max(1, int(os.getenv("LI_OUTREACH_LOG_RETENTION_DAYS", "14")))
except ValueError:
    LOG_RETENTION_DAYS = 14

# Keys in the key-value store
LEADS_KEY = "li_leads"
SETTINGS_KEY = "li_settings"
STATS_KEY = "li_daily_stats"

# Daily limit used when settings carry none
DEFAULT_DAILY_LIMIT = 100

# Auto-scroll defaults (seconds unless noted)
MAX_SCROLL_STEPS = 10
SCROLL_DELAY = 2.0
SCROLL_JITTER = 0.5
SCROLL_STEP_PX = 300
SCROLL_SUBSTEPS = 5
SCROLL_SUBSTEP_DELAY = 0.1
SCROLL_SETTLE = 0.5
NO_CHANGE_LIMIT = 3

# Human-like pauses before extraction, (min, max) seconds
PRE_SCRAPE_DELAY = (0.5, 1.5)
POST_SCROLL_DELAY = (1.0, 2.0)

SEARCH_RESULTS_FRAGMENT = "/search/results/"
PEOPLE_SEARCH_FRAGMENT = "/search/results/people/"
BASE_URL = "https://www.linkedin.com"

# Server
HOST = os.getenv("LI_OUTREACH_HOST", "127.0.0.1")
PORT = int(os.getenv("LI_OUTREACH_PORT", "8000"))


def ensure_dirs() -> None:
    """Create required directories on first run."""
    for d in (DATA_DIR, SESSIONS_DIR, DEBUG_HTML_DIR, LOG_DIR):
        d.mkdir(parents=True, exist_ok=True)
