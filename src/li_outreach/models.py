"""Lead, settings and pipeline result models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from .config import MAX_SCROLL_STEPS, SCROLL_DELAY
from .parsers.common import canonicalize_profile_url

DEFAULT_STATUS = "new"
DEFAULT_DEGREE = "N/A"


def now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def today_str() -> str:
    """Current UTC calendar day as YYYY-MM-DD."""
    return datetime.now(timezone.utc).date().isoformat()


class LeadSource(str, Enum):
    search_result = "search_result"


class Lead(BaseModel):
    """A profile found on a results page.

    Every field is optional so a partial update such as
    ``Lead(id=..., status="contacted")`` can be merged over a stored record;
    only explicitly supplied fields take part in the merge.
    """

    id: str | None = None
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    headline: str = ""
    company: str = ""
    location: str = ""
    profile_url: str | None = None
    connection_degree: str = DEFAULT_DEGREE
    source: LeadSource = LeadSource.search_result
    scraped_at: int | None = None
    status: str | None = None
    updated_at: int | None = None
    notes: str | None = None

    @field_validator("profile_url", mode="before")
    @classmethod
    def strip_query(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return canonicalize_profile_url(v) or None


class SaveStats(BaseModel):
    stored: int = 0
    updated: int = 0
    errors: int = 0


class DailyStats(BaseModel):
    date: str
    count: int = 0
    last_scrape_time: int | None = None


class LimitCheck(BaseModel):
    can_scrape: bool
    remaining: int
    limit: int
    scraped_today: int


class WorkingHours(BaseModel):
    enabled: bool = True
    start: int = Field(default=9, ge=0, le=23)
    end: int = Field(default=18, ge=0, le=24)


class Settings(BaseModel):
    delay_between_actions: int = 120
    random_variance: float = Field(default=0.2, ge=0, le=1)
    daily_connection_limit: int = 50
    daily_message_limit: int = 80
    daily_profile_visit_limit: int = 100
    working_hours: WorkingHours = Field(default_factory=WorkingHours)
    working_days: list[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])
    pause_on_weekends: bool = True


class StopReason(str, Enum):
    target_reached = "target_reached"
    end_of_results = "end_of_results"
    height_stable = "height_stable"
    step_limit = "step_limit"
    error = "error"


class ScrollStrategy(str, Enum):
    jump = "jump"
    graduated = "graduated"


class RevealResult(BaseModel):
    success: bool
    records_visible: int = 0
    steps_taken: int = 0
    reason: StopReason | None = None
    error: str | None = None


class RequestType(str, Enum):
    scrape_page = "SCRAPE_PAGE"
    scrape_all_pages = "SCRAPE_ALL_PAGES"
    get_page_stats = "GET_PAGE_STATS"
    check_daily_limit = "CHECK_DAILY_LIMIT"


class Request(BaseModel):
    type: str
    max_scrolls: int = Field(default=MAX_SCROLL_STEPS, ge=1, le=100)
    scroll_delay: float = Field(default=SCROLL_DELAY, ge=0)
    target_count: int | None = Field(default=None, ge=1)
