from datetime import date, datetime, timedelta, timezone
from typing import Iterator


def utc_now() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch it.
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Calendar date used for attendance and leave coverage checks."""
    return utc_now().date()


def inclusive_days(start: date, end: date) -> int:
    """Number of calendar days in [start, end]; zero or negative when end < start."""
    return (end - start).days + 1


def iter_dates(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
