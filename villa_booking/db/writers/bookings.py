from typing import Any

import structlog
from sqlalchemy.engine import Connection

from villa_booking.db.writers._upsert import insert_or_ignore
from villa_booking.models.bookings import Booking
from villa_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_booking(conn: Connection, data: dict[str, Any]) -> bool:
    """
    Insert a booking unless one already exists for its payment session.

    Args:
        conn (Connection): SQLAlchemy DB connection inside a transaction.
        data (dict): Booking columns; must include id and payment_session_id.

    Returns:
        bool: True if inserted, False if the payment session was already booked.
    """
    now = utc_now()
    row = {**data, "created_at": now, "updated_at": now}

    inserted = insert_or_ignore(conn, Booking, row, conflict_columns=["payment_session_id"])

    if not inserted:
        logger.info(
            "booking_insert_skipped_duplicate",
            payment_session_id=data["payment_session_id"],
        )
    return inserted
