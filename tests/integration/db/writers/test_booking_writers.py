"""
Integration tests for the property, booking and calendar writers.
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Callable

import pytest
from sqlalchemy import select
from sqlalchemy.engine import Engine

from villa_booking.db.readers.bookings import get_booking_by_session
from villa_booking.db.readers.properties import get_property, lock_property
from villa_booking.db.writers.bookings import insert_booking
from villa_booking.db.writers.calendar import mark_nights_booked
from villa_booking.db.writers.properties import insert_property
from villa_booking.models.calendar import CalendarDay


def booking_row(session_id: str, property_id: str) -> dict[str, Any]:
    return {
        "id": uuid.uuid4(),
        "property_id": property_id,
        "guest_name": "Jane Guest",
        "guest_email": "jane@example.com",
        "check_in": date(2030, 6, 1),
        "check_out": date(2030, 6, 4),
        "adults": 2,
        "children": 0,
        "total_price": Decimal("300.00"),
        "status": "confirmed",
        "payment_session_id": session_id,
    }


@pytest.mark.integration
def test_insert_property_is_idempotent(db_engine: Engine, property_id: str) -> None:
    created = insert_property(
        db_engine, {"id": property_id, "name": "Renamed", "base_price": Decimal("1.00")}
    )

    assert created is False
    with db_engine.connect() as conn:
        prop = get_property(conn, property_id)
    assert prop.name == "Ocean View Villa"
    assert prop.base_price == Decimal("100.00")


@pytest.mark.integration
def test_insert_property_dry_run_writes_nothing(db_engine: Engine) -> None:
    created = insert_property(
        db_engine, {"id": "dry-villa", "name": "Dry", "base_price": Decimal("1.00")}, dry_run=True
    )

    assert created is False
    with db_engine.connect() as conn:
        assert get_property(conn, "dry-villa") is None


@pytest.mark.integration
def test_insert_booking_skips_duplicate_session(db_engine: Engine, property_id: str) -> None:
    with db_engine.begin() as conn:
        first = insert_booking(conn, booking_row("cs_dup", property_id))
        second = insert_booking(conn, booking_row("cs_dup", property_id))

    assert first is True
    assert second is False
    with db_engine.connect() as conn:
        booking = get_booking_by_session(conn, "cs_dup")
    assert booking is not None
    assert booking["guest_email"] == "jane@example.com"


@pytest.mark.integration
def test_mark_nights_booked_keeps_custom_price(
    db_engine: Engine, property_id: str, set_calendar_day: Callable[..., None]
) -> None:
    set_calendar_day(property_id, date(2030, 6, 2), price=Decimal("150.00"))
    booking_id = uuid.uuid4()

    with db_engine.begin() as conn:
        mark_nights_booked(
            conn, property_id, [date(2030, 6, 1), date(2030, 6, 2)], booking_id
        )

    with db_engine.connect() as conn:
        rows = conn.execute(
            select(CalendarDay.date, CalendarDay.status, CalendarDay.price, CalendarDay.booking_id)
            .where(CalendarDay.property_id == property_id)
            .order_by(CalendarDay.date)
        ).fetchall()

    assert [(r.date, r.status, r.price) for r in rows] == [
        (date(2030, 6, 1), "booked", None),
        (date(2030, 6, 2), "booked", Decimal("150.00")),
    ]
    assert all(r.booking_id == booking_id for r in rows)


@pytest.mark.integration
def test_lock_property_reports_existence(db_engine: Engine, property_id: str) -> None:
    with db_engine.begin() as conn:
        assert lock_property(conn, property_id) is True
        assert lock_property(conn, "no-such-villa") is False
