"""
Shared arithmetic for the reporting services

Growth percentages, money rounding and the time-range starts used by the
statistics pages.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional


def to_float(value: Any) -> float:
    """Coerce a numeric column (Decimal, str, None) to float; None and junk count as 0"""
    if value is None:
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def round2(value: float) -> float:
    return round(value, 2)


def growth_rate(current: float, previous: float, empty_baseline: float = 0.0) -> float:
    """
    Percentage change from `previous` to `current`

    When there is no previous value the growth is `empty_baseline`:
    revenue and reports use 0, the analytics dashboard uses 100.
    """
    if not previous:
        return empty_baseline
    return (current - previous) / previous * 100


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def range_start(time_range: Optional[str], now: datetime) -> Optional[datetime]:
    """
    Start of a named time range ending now

    today: midnight; week: midnight 7 days back; month: first of the month;
    quarter: first day of the quarter; year: Jan 1. Anything else has no start.
    """
    today = start_of_day(now)

    if time_range == "today":
        return today
    if time_range == "week":
        return today - timedelta(days=7)
    if time_range == "month":
        return today.replace(day=1)
    if time_range == "quarter":
        quarter = (now.month - 1) // 3
        return today.replace(month=quarter * 3 + 1, day=1)
    if time_range == "year":
        return today.replace(month=1, day=1)
    return None


def as_naive(moment: Optional[datetime]) -> Optional[datetime]:
    """Convert aware timestamps to naive UTC so DB values compare with a naive `now`"""
    if moment is None or moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
