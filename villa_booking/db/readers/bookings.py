from datetime import date, timedelta
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from villa_booking.models.bookings import Booking, BookingStatus


def get_booking_by_session(conn: Connection, session_id: str) -> Optional[dict[str, Any]]:
    """
    Fetch the booking created for a Stripe Checkout session.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        session_id (str): Stripe Checkout session ID.

    Returns:
        Optional[dict]: Booking columns or None if no booking exists for the session.
    """
    result = conn.execute(
        select(Booking.__table__).where(Booking.payment_session_id == session_id)
    )
    row = result.mappings().fetchone()
    return dict(row) if row else None


def get_booked_nights(
    conn: Connection, property_id: str, check_in: date, check_out: date
) -> set[date]:
    """
    Nights in [check_in, check_out) already held by confirmed bookings.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property ID.
        check_in (date): First night of the requested stay.
        check_out (date): Departure date (exclusive).

    Returns:
        set[date]: Requested nights that overlap an existing booking.
    """
    result = conn.execute(
        select(Booking.check_in, Booking.check_out)
        .where(Booking.property_id == property_id)
        .where(Booking.status == BookingStatus.CONFIRMED.value)
        .where(Booking.check_in < check_out)
        .where(Booking.check_out > check_in)
    )

    nights: set[date] = set()
    for booked_in, booked_out in result:
        night = max(booked_in, check_in)
        while night < min(booked_out, check_out):
            nights.add(night)
            night += timedelta(days=1)
    return nights
