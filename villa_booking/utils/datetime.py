"""UTC datetime and calendar-date utilities."""

from datetime import date, datetime, timedelta, timezone
from typing import Iterator


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This function should be used instead of datetime.now() or datetime.utcnow()
    to ensure all timestamps are timezone-aware and stored in UTC.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def parse_iso_date(value: str) -> date:
    """
    Parse a yyyy-MM-dd string into a date.

    Raises:
        ValueError: If the value is not a valid yyyy-MM-dd date
    """
    return datetime.strptime(value, "%Y-%m-%d").date()


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end, both inclusive."""
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)


def stay_nights(check_in: date, check_out: date) -> list[date]:
    """
    Nights of a stay: [check_in, check_out). The check-out date is not a night.

    Example:
        >>> stay_nights(date(2024, 6, 1), date(2024, 6, 4))
        [datetime.date(2024, 6, 1), datetime.date(2024, 6, 2), datetime.date(2024, 6, 3)]
    """
    return list(iter_dates(check_in, check_out - timedelta(days=1)))
