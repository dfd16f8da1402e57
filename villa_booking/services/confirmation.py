"""
Payment confirmation handler.

Turns a verified "checkout.session.completed" event into exactly one booking.
Everything that decides whether the booking may exist runs in one database
transaction, under a row lock on the property:

1. an existing booking for the same payment session makes the delivery a no-op
2. the requested nights are re-checked against the calendar and bookings
3. the booking is inserted (ON CONFLICT DO NOTHING on payment_session_id)
4. the nights are marked booked

Stripe delivers events at least once, so redelivery must be harmless; and
time passes between quote and payment, so the re-check is the last point
where a double booking can be refused.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping

import structlog
from sqlalchemy.engine import Connection, Engine

from villa_booking.db.readers.bookings import get_booking_by_session
from villa_booking.db.readers.properties import lock_property
from villa_booking.db.writers.bookings import insert_booking
from villa_booking.db.writers.calendar import mark_nights_booked
from villa_booking.errors import ConflictError, NotFoundError, ValidationError
from villa_booking.metrics import booking_conflicts, bookings_created
from villa_booking.models.bookings import BookingStatus
from villa_booking.services.availability import find_unavailable_nights
from villa_booking.services.pricing import quote_stay, to_minor_units, validate_stay_dates
from villa_booking.utils.datetime import parse_iso_date, stay_nights

logger = structlog.get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"

REQUIRED_METADATA = (
    "property_id",
    "check_in",
    "check_out",
    "adults",
    "guest_name",
    "guest_email",
    "total_price",
)


class ConfirmationOutcome(str, Enum):
    INSERTED = "inserted"
    DUPLICATE = "duplicate"
    CONFLICT = "conflict"
    IGNORED = "ignored"


@dataclass(frozen=True)
class PaidBooking:
    """Booking parameters recovered from a completed checkout session."""

    session_id: str
    property_id: str
    check_in: date
    check_out: date
    adults: int
    children: int
    guest_name: str
    guest_email: str
    total_price: Decimal
    amount_total: int | None = None


def parse_checkout_session(session: Mapping[str, Any]) -> PaidBooking:
    """
    Extract booking parameters from a Stripe Checkout session object.

    Args:
        session: The event's data.object (id, metadata, amount_total)

    Returns:
        PaidBooking: Typed booking parameters

    Raises:
        ValidationError: If the session id or any metadata field is missing or malformed
    """
    session_id = session.get("id")
    if not session_id:
        raise ValidationError("Checkout session has no id")

    metadata = session.get("metadata") or {}
    missing = [key for key in REQUIRED_METADATA if not metadata.get(key)]
    if missing:
        raise ValidationError(f"Checkout session metadata is missing: {', '.join(missing)}")

    try:
        paid = PaidBooking(
            session_id=session_id,
            property_id=str(metadata["property_id"]),
            check_in=parse_iso_date(metadata["check_in"]),
            check_out=parse_iso_date(metadata["check_out"]),
            adults=int(metadata["adults"]),
            children=int(metadata.get("children") or 0),
            guest_name=str(metadata["guest_name"]),
            guest_email=str(metadata["guest_email"]),
            total_price=Decimal(str(metadata["total_price"])),
            amount_total=session.get("amount_total"),
        )
    except (ValueError, InvalidOperation) as e:
        raise ValidationError(f"Checkout session metadata is malformed: {e}") from e

    validate_stay_dates(paid.check_in, paid.check_out)
    if paid.adults < 1 or paid.children < 0:
        raise ValidationError("Checkout session metadata has an invalid party size")
    return paid


def audit_charged_price(conn: Connection, paid: PaidBooking) -> None:
    """
    Re-derive the stay price and log any mismatch with what was charged.

    The charged total is authoritative and is never replaced; a mismatch
    only means calendar prices changed after the quote.
    """
    quote = quote_stay(conn, paid.property_id, paid.check_in, paid.check_out, stage="confirmation")

    if quote.total != paid.total_price:
        logger.warning(
            "booking_price_changed_since_quote",
            session_id=paid.session_id,
            property_id=paid.property_id,
            charged=str(paid.total_price),
            current=str(quote.total),
        )

    if paid.amount_total is not None and paid.amount_total != to_minor_units(paid.total_price):
        logger.warning(
            "booking_amount_mismatch",
            session_id=paid.session_id,
            property_id=paid.property_id,
            metadata_total=str(paid.total_price),
            amount_total=paid.amount_total,
        )


def confirm_paid_booking(conn: Connection, paid: PaidBooking) -> ConfirmationOutcome:
    """
    Create the booking for a paid checkout session, at most once.

    Must run inside a transaction; a ConflictError leaves nothing written
    once the caller's transaction rolls back.

    Args:
        conn: Connection inside an open transaction
        paid: Parsed checkout session

    Returns:
        ConfirmationOutcome: INSERTED, or DUPLICATE if the session was already booked

    Raises:
        NotFoundError: If the property does not exist
        ConflictError: If another booking or block took any of the nights
    """
    if not lock_property(conn, paid.property_id):
        raise NotFoundError("Property not found")

    if get_booking_by_session(conn, paid.session_id) is not None:
        logger.info(
            "booking_already_confirmed",
            session_id=paid.session_id,
            property_id=paid.property_id,
        )
        return ConfirmationOutcome.DUPLICATE

    taken = find_unavailable_nights(conn, paid.property_id, paid.check_in, paid.check_out)
    if taken:
        raise ConflictError("Some dates are no longer available", taken)

    audit_charged_price(conn, paid)

    booking_id = uuid.uuid4()
    inserted = insert_booking(
        conn,
        {
            "id": booking_id,
            "property_id": paid.property_id,
            "guest_name": paid.guest_name,
            "guest_email": paid.guest_email,
            "check_in": paid.check_in,
            "check_out": paid.check_out,
            "adults": paid.adults,
            "children": paid.children,
            "total_price": paid.total_price,
            "status": BookingStatus.CONFIRMED.value,
            "payment_session_id": paid.session_id,
        },
    )
    if not inserted:
        return ConfirmationOutcome.DUPLICATE

    mark_nights_booked(
        conn, paid.property_id, stay_nights(paid.check_in, paid.check_out), booking_id
    )

    bookings_created.inc()
    logger.info(
        "booking_created",
        booking_id=str(booking_id),
        session_id=paid.session_id,
        property_id=paid.property_id,
        check_in=paid.check_in.isoformat(),
        check_out=paid.check_out.isoformat(),
        total_price=str(paid.total_price),
    )
    return ConfirmationOutcome.INSERTED


def handle_payment_event(engine: Engine, event: Mapping[str, Any]) -> ConfirmationOutcome:
    """
    Process a verified Stripe event.

    Only checkout.session.completed creates bookings; every other event type is
    acknowledged and ignored. A conflict is reported as an outcome rather than
    an error: redelivering the event cannot make the nights free again, and the
    guest's payment has to be refunded instead.

    Args:
        engine: Database engine; one transaction is opened for the confirmation
        event: Verified event (type, data.object)

    Returns:
        ConfirmationOutcome: What happened to the event

    Raises:
        ValidationError: If the session metadata is missing or malformed
        NotFoundError: If the property in the metadata does not exist
        SQLAlchemyError: If the database fails (the caller answers 500 so Stripe retries)
    """
    event_type = event.get("type")
    if event_type != CHECKOUT_COMPLETED:
        logger.info("webhook_event_ignored", event_type=event_type, event_id=event.get("id"))
        return ConfirmationOutcome.IGNORED

    session = (event.get("data") or {}).get("object") or {}
    paid = parse_checkout_session(session)

    try:
        with engine.begin() as conn:
            return confirm_paid_booking(conn, paid)
    except ConflictError as e:
        booking_conflicts.labels(stage="confirmation").inc()
        logger.error(
            "booking_conflict_refund_required",
            session_id=paid.session_id,
            property_id=paid.property_id,
            check_in=paid.check_in.isoformat(),
            check_out=paid.check_out.isoformat(),
            dates=[d.isoformat() for d in e.dates],
        )
        return ConfirmationOutcome.CONFLICT
