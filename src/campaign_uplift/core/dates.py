"""Calendar-day helpers. All arithmetic is on ``datetime.date``; no timezones."""

from __future__ import annotations

import datetime as dt


def to_date(value: dt.date | dt.datetime | str) -> dt.date:
    """Coerce an ISO string, datetime or date into a ``date``."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(str(value)[:10])


def add_days(day: dt.date, days: int) -> dt.date:
    return day + dt.timedelta(days=days)


def date_range(start: dt.date, end: dt.date) -> list[dt.date]:
    """Inclusive list of days from *start* to *end* (empty if end < start)."""
    n_days = (end - start).days + 1
    return [start + dt.timedelta(days=i) for i in range(max(n_days, 0))]


def windows_overlap(
    a: tuple[dt.date, dt.date],
    b: tuple[dt.date, dt.date],
) -> bool:
    """True if two inclusive day ranges share at least one day."""
    return a[0] <= b[1] and b[0] <= a[1]
