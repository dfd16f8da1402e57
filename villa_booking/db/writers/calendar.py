from datetime import date
from uuid import UUID

import structlog
from sqlalchemy.engine import Connection

from villa_booking.db.writers._upsert import upsert_rows
from villa_booking.models.calendar import CalendarDay, CalendarStatus
from villa_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def mark_nights_booked(
    conn: Connection, property_id: str, nights: list[date], booking_id: UUID
) -> None:
    """
    Mark the given nights as booked by a booking.

    Creates missing calendar rows and flips existing ones to booked. A custom
    price already stored for a night is kept.

    Args:
        conn (Connection): SQLAlchemy DB connection inside a transaction.
        property_id (str): Property ID.
        nights (list[date]): Nights covered by the booking.
        booking_id (UUID): Booking that now holds the nights.
    """
    now = utc_now()
    rows = [
        {
            "property_id": property_id,
            "date": night,
            "status": CalendarStatus.BOOKED.value,
            "booking_id": booking_id,
            "created_at": now,
            "updated_at": now,
        }
        for night in nights
    ]

    upsert_rows(
        conn,
        CalendarDay,
        rows,
        conflict_columns=["property_id", "date"],
        update_columns=["status", "booking_id", "updated_at"],
    )

    logger.info(
        "calendar_nights_booked",
        property_id=property_id,
        booking_id=str(booking_id),
        nights=len(rows),
    )
