from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from billiards.core.config import settings

# (start, end) as naive UTC datetimes, end exclusive; None means open-ended
Window = Tuple[Optional[datetime], Optional[datetime]]


class ExpenseTimeframe(str, Enum):
    week = "week"
    month = "month"
    year = "year"
    all = "all"


class StatsTimeframe(str, Enum):
    all = "all"
    today = "today"
    daily = "daily"


def utcnow() -> datetime:
    # Stored timestamps are naive UTC (SQLite drops tzinfo anyway)
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_utc_naive(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _local_now(now: Optional[datetime], tz: ZoneInfo) -> datetime:
    if now is None:
        return datetime.now(tz)
    # naive input is taken as UTC, same as the stored rows
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz)


def today_window(now: Optional[datetime] = None, tz: Optional[ZoneInfo] = None) -> Window:
    tz = tz or settings.tz
    local = _local_now(now, tz)
    start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return _as_utc_naive(start), _as_utc_naive(start + timedelta(days=1))


def expense_window(
    timeframe: ExpenseTimeframe,
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
) -> Window:
    tz = tz or settings.tz
    local = _local_now(now, tz)

    if timeframe == ExpenseTimeframe.week:
        # rolling, not calendar-aligned
        return _as_utc_naive(local - timedelta(days=7)), None

    if timeframe == ExpenseTimeframe.month:
        start = local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        return _as_utc_naive(start), _as_utc_naive(start + relativedelta(months=1))

    if timeframe == ExpenseTimeframe.year:
        start = local.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        return _as_utc_naive(start), _as_utc_naive(start + relativedelta(years=1))

    return None, None


def window_filters(column, window: Window) -> list:
    """SQLAlchemy predicates restricting ``column`` to ``window``."""
    start, end = window
    out = []
    if start is not None:
        out.append(column >= start)
    if end is not None:
        out.append(column < end)
    return out
