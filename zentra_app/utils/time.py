"""
Time semantics utilities for trade timestamps and reference times.

This module centralizes the UTC normalization used for day grouping,
time-of-day windows and the gap measurements between consecutive trades.
"""

import calendar
from datetime import UTC, date, datetime, timedelta
from typing import Optional


def to_utc(ts: datetime) -> datetime:
    """
    Normalize a timestamp to an aware UTC datetime.

    Args:
        ts: Aware or naive datetime (naive values are taken as UTC)

    Returns:
        Timezone-aware UTC datetime
    """
    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


def get_reference_time(now: Optional[datetime] = None) -> datetime:
    """
    Get the reference "now", preferring a caller-supplied value over wall-clock time.

    Args:
        now: Optional reference time supplied by the caller

    Returns:
        Reference time as UTC datetime
    """
    if now is not None:
        return to_utc(now)

    return datetime.now(UTC)


def day_key(ts: datetime) -> date:
    """Calendar date (UTC) used to bucket a trade by day."""
    return to_utc(ts).date()


def minutes_between(start: datetime, end: datetime) -> float:
    """Signed minutes elapsed from start to end."""
    return (to_utc(end) - to_utc(start)).total_seconds() / 60.0


def hours_between(start: datetime, end: datetime) -> float:
    """Signed hours elapsed from start to end."""
    return minutes_between(start, end) / 60.0


def shift_months(ts: datetime, months: int) -> datetime:
    """
    Move a timestamp back or forward by whole calendar months.

    The day of month is clamped to the length of the target month, so
    March 31 minus one month is February 28 (or 29).
    """
    month_index = ts.month - 1 + months
    year = ts.year + month_index // 12
    month = month_index % 12 + 1
    day = min(ts.day, calendar.monthrange(year, month)[1])
    return ts.replace(year=year, month=month, day=day)


def period_start(period: str, now: Optional[datetime] = None) -> datetime:
    """
    Start of the look-back range for a reporting period.

    Args:
        period: WEEK, MONTH, QUARTER or YEAR (anything else means MONTH)
        now: Reference time, defaults to wall-clock time

    Returns:
        UTC datetime marking the start of the period
    """
    reference = get_reference_time(now)
    period = (period or "").upper()

    if period == "WEEK":
        return reference - timedelta(days=7)
    if period == "QUARTER":
        return shift_months(reference, -3)
    if period == "YEAR":
        return shift_months(reference, -12)
    return shift_months(reference, -1)
