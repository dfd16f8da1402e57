"""Integration tests for turning paid checkout sessions into bookings."""

from datetime import date
from decimal import Decimal
from typing import Any, Callable

import pytest
from prometheus_client import REGISTRY
from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from villa_booking.errors import NotFoundError, ValidationError
from villa_booking.models.bookings import Booking
from villa_booking.models.calendar import CalendarDay
from villa_booking.services.confirmation import ConfirmationOutcome, handle_payment_event


def count_bookings(engine: Engine) -> int:
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(Booking)).scalar_one()


def booked_nights(engine: Engine, property_id: str) -> list[date]:
    with engine.connect() as conn:
        result = conn.execute(
            select(CalendarDay.date)
            .where(CalendarDay.property_id == property_id)
            .where(CalendarDay.status == "booked")
            .order_by(CalendarDay.date)
        )
        return [row[0] for row in result]


@pytest.mark.integration
def test_completed_checkout_creates_booking_and_books_nights(
    db_engine: Engine, property_id: str, checkout_event: Callable[..., dict[str, Any]]
) -> None:
    outcome = handle_payment_event(db_engine, checkout_event(total_price="300.00"))

    assert outcome is ConfirmationOutcome.INSERTED
    with db_engine.connect() as conn:
        booking = conn.execute(select(Booking.__table__)).mappings().one()

    assert booking["payment_session_id"] == "cs_test_123"
    assert booking["check_in"] == date(2030, 6, 1)
    assert booking["check_out"] == date(2030, 6, 4)
    assert booking["total_price"] == Decimal("300.00")
    assert booking["adults"] == 2
    assert booking["children"] == 1
    assert booking["status"] == "confirmed"
    assert booked_nights(db_engine, property_id) == [
        date(2030, 6, 1),
        date(2030, 6, 2),
        date(2030, 6, 3),
    ]


@pytest.mark.integration
def test_redelivered_event_creates_one_booking(
    db_engine: Engine, property_id: str, checkout_event: Callable[..., dict[str, Any]]
) -> None:
    event = checkout_event()

    first = handle_payment_event(db_engine, event)
    second = handle_payment_event(db_engine, event)

    assert first is ConfirmationOutcome.INSERTED
    assert second is ConfirmationOutcome.DUPLICATE
    assert count_bookings(db_engine) == 1
    assert len(booked_nights(db_engine, property_id)) == 3


@pytest.mark.integration
def test_overlapping_paid_session_is_refused(
    db_engine: Engine, property_id: str, checkout_event: Callable[..., dict[str, Any]]
) -> None:
    """Two sessions paid for overlapping nights: only the first becomes a booking."""
    before = (
        REGISTRY.get_sample_value("villa_booking_conflicts_total", {"stage": "confirmation"})
        or 0.0
    )

    handle_payment_event(db_engine, checkout_event(session_id="cs_first"))
    outcome = handle_payment_event(
        db_engine,
        checkout_event(session_id="cs_second", check_in="2030-06-03", check_out="2030-06-05"),
    )

    assert outcome is ConfirmationOutcome.CONFLICT
    assert count_bookings(db_engine) == 1
    assert date(2030, 6, 4) not in booked_nights(db_engine, property_id)
    after = REGISTRY.get_sample_value(
        "villa_booking_conflicts_total", {"stage": "confirmation"}
    )
    assert after == before + 1


@pytest.mark.integration
def test_blocked_night_refuses_paid_session(
    db_engine: Engine,
    property_id: str,
    set_calendar_day: Callable[..., None],
    checkout_event: Callable[..., dict[str, Any]],
) -> None:
    set_calendar_day(property_id, date(2030, 6, 2), status="blocked")

    outcome = handle_payment_event(db_engine, checkout_event())

    assert outcome is ConfirmationOutcome.CONFLICT
    assert count_bookings(db_engine) == 0
    assert booked_nights(db_engine, property_id) == []


@pytest.mark.integration
def test_adjacent_stays_both_confirm(
    db_engine: Engine, property_id: str, checkout_event: Callable[..., dict[str, Any]]
) -> None:
    """A stay may start on the previous stay's check-out date."""
    handle_payment_event(db_engine, checkout_event(session_id="cs_a"))
    outcome = handle_payment_event(
        db_engine,
        checkout_event(session_id="cs_b", check_in="2030-06-04", check_out="2030-06-06"),
    )

    assert outcome is ConfirmationOutcome.INSERTED
    assert count_bookings(db_engine) == 2


@pytest.mark.integration
def test_custom_night_price_survives_booking(
    db_engine: Engine,
    property_id: str,
    set_calendar_day: Callable[..., None],
    checkout_event: Callable[..., dict[str, Any]],
) -> None:
    set_calendar_day(property_id, date(2030, 6, 2), price=Decimal("150.00"))

    handle_payment_event(db_engine, checkout_event(total_price="350.00"))

    with db_engine.connect() as conn:
        row = conn.execute(
            select(CalendarDay.status, CalendarDay.price, CalendarDay.booking_id).where(
                CalendarDay.date == date(2030, 6, 2)
            )
        ).one()
    assert row.status == "booked"
    assert row.price == Decimal("150.00")
    assert row.booking_id is not None


@pytest.mark.integration
def test_unknown_property_in_metadata(
    db_engine: Engine, property_id: str, checkout_event: Callable[..., dict[str, Any]]
) -> None:
    with pytest.raises(NotFoundError):
        handle_payment_event(db_engine, checkout_event(property_id="no-such-villa"))

    assert count_bookings(db_engine) == 0


@pytest.mark.integration
def test_zero_night_metadata_is_rejected(
    db_engine: Engine, property_id: str, checkout_event: Callable[..., dict[str, Any]]
) -> None:
    with pytest.raises(ValidationError):
        handle_payment_event(
            db_engine, checkout_event(check_in="2030-06-01", check_out="2030-06-01")
        )

    assert count_bookings(db_engine) == 0
