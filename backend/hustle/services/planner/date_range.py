"""Calendar helpers working on local wall-clock days."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import List


def to_local_date(value: str | date | datetime) -> date:
    """Return the local calendar day for an ISO date/datetime string or object.

    Aware datetimes are converted to the host's local time first so that
    "2024-01-01T23:30:00-08:00" lands on the calendar day of the host clock.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        return value
    else:
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def start_of_day_local(value: str | date | datetime) -> datetime:
    return datetime.combine(to_local_date(value), time.min)


def end_of_day_local(value: str | date | datetime) -> datetime:
    return datetime.combine(to_local_date(value), time.max)


def days_between_inclusive(start: str | date | datetime, end: str | date | datetime) -> int:
    """Number of day steps from ``start`` to ``end``; negative ranges clamp to 0."""
    return max(0, (to_local_date(end) - to_local_date(start)).days)


def add_days_iso(start: str | date | datetime, offset: int) -> str:
    return (to_local_date(start) + timedelta(days=offset)).isoformat()


def each_day_iso_inclusive(start_iso: str, end_iso: str) -> List[str]:
    """Ordered ISO days from ``start_iso`` through ``end_iso``.

    An end before the start yields just the start day.
    """
    start = to_local_date(start_iso)
    span = days_between_inclusive(start, end_iso)
    return [(start + timedelta(days=offset)).isoformat() for offset in range(span + 1)]
