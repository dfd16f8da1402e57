"""Checkout orchestration: validate a stay, price it, and issue a payment session."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from villa_booking.config import CHECKOUT_DEDUP_WINDOW_SECONDS
from villa_booking.errors import ConflictError, UpstreamError
from villa_booking.metrics import booking_conflicts, checkout_sessions
from villa_booking.payments.stripe_client import (
    CheckoutSession,
    StripeCheckoutClient,
    build_idempotency_key,
)
from villa_booking.schemas.bookings import BookingCreatePayload
from villa_booking.services.availability import find_unavailable_nights
from villa_booking.services.pricing import (
    Quote,
    quote_stay,
    validate_chargeable_total,
    validate_stay_dates,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutIntent:
    """A priced, availability-checked stay waiting for payment."""

    quote: Quote
    adults: int
    children: int
    guest_name: str
    guest_email: str

    def metadata(self) -> dict[str, str]:
        """Booking parameters carried through Stripe and read back by the webhook."""
        return {
            "property_id": self.quote.property_id,
            "check_in": self.quote.check_in.isoformat(),
            "check_out": self.quote.check_out.isoformat(),
            "adults": str(self.adults),
            "children": str(self.children),
            "guest_name": self.guest_name,
            "guest_email": self.guest_email,
            "total_price": str(self.quote.total),
        }

    def description(self) -> str:
        nights = self.quote.nights
        return (
            f"{nights} night{'s' if nights > 1 else ''} from "
            f"{self.quote.check_in:%B %d, %Y} to {self.quote.check_out:%B %d, %Y}"
        )


def prepare_checkout(conn: Connection, payload: BookingCreatePayload) -> CheckoutIntent:
    """
    Validate and price a booking request.

    Args:
        conn: Active database connection
        payload: Booking request from the booking page

    Returns:
        CheckoutIntent: priced stay ready for payment

    Raises:
        ValidationError: If the stay has no nights, is too long or costs too much
        NotFoundError: If the property does not exist
        ConflictError: If any requested night is already taken (lists those nights)
        UpstreamError: If the database query fails
    """
    validate_stay_dates(payload.check_in, payload.check_out)

    # Pricing raises NotFoundError before the availability lookup runs
    quote = quote_stay(
        conn, payload.property_id, payload.check_in, payload.check_out, stage="checkout"
    )
    validate_chargeable_total(quote.total)

    try:
        taken = find_unavailable_nights(
            conn, payload.property_id, payload.check_in, payload.check_out
        )
    except SQLAlchemyError as e:
        logger.error(
            "availability_check_failed",
            property_id=payload.property_id,
            check_in=payload.check_in.isoformat(),
            check_out=payload.check_out.isoformat(),
            error=str(e),
        )
        raise UpstreamError("Could not check availability") from e

    if taken:
        booking_conflicts.labels(stage="checkout").inc()
        checkout_sessions.labels(status="conflict").inc()
        logger.warning(
            "checkout_dates_unavailable",
            property_id=payload.property_id,
            check_in=payload.check_in.isoformat(),
            check_out=payload.check_out.isoformat(),
            dates=[d.isoformat() for d in taken],
        )
        raise ConflictError("Some dates are not available", taken)

    return CheckoutIntent(
        quote=quote,
        adults=payload.adults,
        children=payload.children,
        guest_name=payload.guest_info.name,
        guest_email=str(payload.guest_info.email),
    )


def issue_checkout(
    client: StripeCheckoutClient, intent: CheckoutIntent, now: Optional[float] = None
) -> CheckoutSession:
    """
    Create the hosted payment page for a prepared stay.

    The amount charged is the quoted total converted to minor units. The
    idempotency key covers the whole intent plus the current dedup window, so
    resubmitting the same form shortly after returns the same session rather
    than a second one. Stripe replays a key's first response, failures
    included, so the window also bounds how long a failed attempt is replayed.

    Args:
        client: Stripe Checkout client
        intent: Result of prepare_checkout
        now: Unix time used to pick the dedup window (defaults to the clock)

    Returns:
        CheckoutSession: session ID and redirect URL

    Raises:
        UpstreamError: If the payment provider fails
    """
    metadata = intent.metadata()
    amount_minor = intent.quote.amount_minor
    window = int((time.time() if now is None else now) // CHECKOUT_DEDUP_WINDOW_SECONDS)
    idempotency_key = build_idempotency_key(
        {**metadata, "amount_minor": str(amount_minor), "window": str(window)}
    )

    try:
        session = client.create_session(
            amount_minor=amount_minor,
            name=f"Booking for {intent.quote.property_name}",
            description=intent.description(),
            metadata=metadata,
            idempotency_key=idempotency_key,
        )
    except UpstreamError:
        checkout_sessions.labels(status="failed").inc()
        raise

    checkout_sessions.labels(status="created").inc()
    return session
