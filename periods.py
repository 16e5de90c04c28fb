import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from config import get_settings


TIME_FRAMES: dict[str, int] = {"1M": 1, "3M": 3, "6M": 6, "1Y": 12}


@dataclass(frozen=True)
class Period:
    slug: str
    start: date
    end: date


def local_today() -> date:
    return datetime.now(ZoneInfo(get_settings().timezone)).date()


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_end(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def shift_months(d: date, count: int) -> date:
    """Move ``d`` by ``count`` months, clamping the day to the target month's end."""
    month_index = (d.year * 12) + (d.month - 1) + count
    year = month_index // 12
    month = (month_index % 12) + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def current_month(today: Optional[date] = None) -> Period:
    today = today or local_today()
    return Period("this_month", month_start(today), month_end(today))


def resolve_time_frame(frame: Optional[str], *, today: Optional[date] = None) -> Period:
    today = today or local_today()
    frame = frame or "1M"
    if frame not in TIME_FRAMES:
        raise ValueError(f"Unknown time frame: {frame}")
    return Period(frame, shift_months(today, -TIME_FRAMES[frame]), today)
