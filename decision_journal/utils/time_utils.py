"""
Calendar helpers for decision analytics.

Key concepts:
  - Local calendar days: streaks and activity buckets are keyed by the
    user's *local* calendar day, not rolling 24-hour windows. Naive
    datetimes are taken to already be local; aware datetimes are
    converted with ``astimezone()``.
  - Time-range cut-offs: dashboard look-back windows (day/week/month/year).
  - Relative dates: the "Today" / "Yesterday" / "3 days ago" labels shown
    next to history entries.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

_MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
_WEEKDAY_ABBR = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def to_local(dt: datetime) -> datetime:
    """Return ``dt`` expressed as a naive local datetime."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def local_day(dt: datetime) -> date:
    """Return the local calendar day ``dt`` falls on."""
    return to_local(dt).date()


def day_key(day: date) -> str:
    """Return the ``year-month-day`` key used for day-set membership."""
    return f"{day.year}-{day.month}-{day.day}"


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return the naive local ``[00:00, next 00:00)`` bounds of ``day``."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def weekday_label(day: date) -> str:
    """Return a fixed English weekday abbreviation, e.g. ``"Mon"``."""
    return _WEEKDAY_ABBR[day.weekday()]


def date_range(start: date, end: date, step_days: int = 1) -> list[date]:
    """Generate a list of dates from ``start`` to ``end`` (inclusive).

    Raises:
        ValueError: If ``end < start`` or ``step_days < 1``.
    """
    if end < start:
        raise ValueError(f"end ({end}) must be >= start ({start}).")
    if step_days < 1:
        raise ValueError(f"step_days must be >= 1, got {step_days}.")

    result: list[date] = []
    current = start
    while current <= end:
        result.append(current)
        current += timedelta(days=step_days)
    return result


def subtract_months(dt: datetime, months: int) -> datetime:
    """Step ``dt`` back ``months`` calendar months, clamping the day of month."""
    month_index = dt.year * 12 + (dt.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = _days_in_month(year, month)
    return dt.replace(year=year, month=month, day=min(dt.day, last_day))


def _days_in_month(year: int, month: int) -> int:
    if month == 12:
        return 31
    return (date(year, month + 1, 1) - timedelta(days=1)).day


def format_relative_date(dt: datetime, now: Optional[datetime] = None) -> str:
    """Human-friendly age label for a timestamp.

    Whole elapsed days (absolute, floor) pick the label:
      0 → ``"Today"``, 1 → ``"Yesterday"``, 2–6 → ``"N days ago"``,
      7–365 → ``"Oct 3"``, more than 365 → ``"Oct 3, 2024"``.

    Args:
        dt: Timestamp to describe.
        now: Reference time; defaults to the current local time.

    Returns:
        Label string.
    """
    local_dt = to_local(dt)
    reference = to_local(now) if now is not None else datetime.now()
    diff_days = int(abs((reference - local_dt).total_seconds()) // 86400)

    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if diff_days < 7:
        return f"{diff_days} days ago"
    label = f"{_MONTH_ABBR[local_dt.month - 1]} {local_dt.day}"
    if diff_days > 365:
        label += f", {local_dt.year}"
    return label


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(tz=timezone.utc)
