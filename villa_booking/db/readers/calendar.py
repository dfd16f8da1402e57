from datetime import date
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.engine import Connection, Row

from villa_booking.models.calendar import UNAVAILABLE_STATUSES, CalendarDay


def get_calendar_days(
    conn: Connection, property_id: str, start: date, end: date
) -> Sequence[Row[Any]]:
    """
    Fetch calendar rows for a property with dates in [start, end] inclusive.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property ID.
        start (date): First date (inclusive).
        end (date): Last date (inclusive).

    Returns:
        Sequence[Row]: Rows with date, status and price, ordered by date.
    """
    result = conn.execute(
        select(CalendarDay.date, CalendarDay.status, CalendarDay.price)
        .where(CalendarDay.property_id == property_id)
        .where(CalendarDay.date >= start)
        .where(CalendarDay.date <= end)
        .order_by(CalendarDay.date)
    )
    return result.fetchall()


def get_unavailable_dates(
    conn: Connection, property_id: str, check_in: date, check_out: date
) -> list[date]:
    """
    List the nights in [check_in, check_out) that are booked or blocked.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property ID.
        check_in (date): First night of the stay.
        check_out (date): Departure date (exclusive).

    Returns:
        list[date]: Unavailable nights, ascending.
    """
    result = conn.execute(
        select(CalendarDay.date)
        .where(CalendarDay.property_id == property_id)
        .where(CalendarDay.date >= check_in)
        .where(CalendarDay.date < check_out)
        .where(CalendarDay.status.in_(UNAVAILABLE_STATUSES))
        .order_by(CalendarDay.date)
    )
    return [row[0] for row in result]
