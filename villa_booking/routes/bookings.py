from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.engine import Engine

from villa_booking.db.readers.bookings import get_booking_by_session
from villa_booking.dependencies import get_checkout_client, get_db_engine
from villa_booking.errors import BookingError, NotFoundError, UpstreamError
from villa_booking.payments.stripe_client import StripeCheckoutClient
from villa_booking.routes._booking_helpers import require_param, serialize_booking
from villa_booking.schemas.bookings import BookingCreatePayload
from villa_booking.services.checkout import issue_checkout, prepare_checkout

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/booking/create")
def create_booking_session(
    payload: BookingCreatePayload,
    engine: Engine = Depends(get_db_engine),
    checkout_client: StripeCheckoutClient = Depends(get_checkout_client),
) -> dict[str, Any]:
    """
    Start checkout for a stay.

    Validates the dates, prices every night, refuses nights that are already
    taken and creates a hosted payment session. No booking is stored here; it
    is created by the payment webhook once the guest has paid.

    Args:
        payload: Booking form data (propertyId, checkIn, checkOut, adults, children, guestInfo)

    Returns:
        dict: {"sessionId": ..., "url": ...} for redirecting the guest to payment

    Raises:
        ValidationError: 400 if the stay has no nights
        ConflictError: 400 with the taken dates
        NotFoundError: 404 if the property does not exist
        UpstreamError: 500 if the database or payment provider fails
    """
    try:
        with engine.connect() as conn:
            intent = prepare_checkout(conn, payload)
    except BookingError:
        raise
    except Exception as e:
        logger.exception(
            "checkout_preparation_failed",
            property_id=payload.property_id,
            check_in=payload.check_in.isoformat(),
            check_out=payload.check_out.isoformat(),
            error=str(e),
        )
        raise UpstreamError("Could not prepare checkout")

    # The payment call runs with no database connection checked out
    session = issue_checkout(checkout_client, intent)

    logger.info(
        "checkout_session_created",
        session_id=session.id,
        property_id=payload.property_id,
        check_in=payload.check_in.isoformat(),
        check_out=payload.check_out.isoformat(),
        nights=intent.quote.nights,
        total_price=str(intent.quote.total),
    )

    return {"sessionId": session.id, "url": session.url}


@router.get("/booking/details")
def get_booking_details(
    session_id: Optional[str] = Query(None, description="Stripe Checkout session ID"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Fetch the booking created for a completed payment session.

    Used by the confirmation page the guest lands on after paying. Until the
    webhook has been processed the booking does not exist yet and this
    returns 404.

    Returns:
        dict: {"booking": {...}}
    """
    sid = require_param(session_id, "session_id", "Missing session ID")

    try:
        with engine.connect() as conn:
            booking = get_booking_by_session(conn, sid)
    except Exception as e:
        logger.exception("booking_details_failed", session_id=sid, error=str(e))
        raise UpstreamError("Could not fetch booking details")

    if booking is None:
        raise NotFoundError("Booking not found")

    return {"booking": serialize_booking(booking)}
