"""
Booking price calculator.

A stay is charged per night over [check_in, check_out); the check-out date is
not a night. Each night costs its calendar price when one is set, otherwise
the property's base price. Amounts stay exact Decimals and are only rounded
when converted to the payment provider's minor units.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

import structlog
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from villa_booking.config import MAX_STAY_NIGHTS
from villa_booking.db.readers.calendar import get_calendar_days
from villa_booking.db.readers.properties import get_property
from villa_booking.errors import NotFoundError, UpstreamError, ValidationError
from villa_booking.metrics import price_quotes
from villa_booking.services.availability import overlay_calendar

logger = structlog.get_logger(__name__)

MINOR_UNITS_PER_UNIT = Decimal(100)

# Largest single charge Stripe accepts, in minor units (eight digits)
MAX_AMOUNT_MINOR = 99_999_999


@dataclass(frozen=True)
class Quote:
    property_id: str
    property_name: str
    check_in: date
    check_out: date
    nightly: dict[date, Decimal]
    total: Decimal

    @property
    def nights(self) -> int:
        return len(self.nightly)

    @property
    def amount_minor(self) -> int:
        return to_minor_units(self.total)


def to_minor_units(amount: Decimal) -> int:
    """
    Convert an amount to integer minor units (cents), rounding half up.

    Example:
        >>> to_minor_units(Decimal("299.995"))
        30000
    """
    scaled = Decimal(amount) * MINOR_UNITS_PER_UNIT
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def validate_stay_dates(check_in: date, check_out: date) -> None:
    """
    Require at least one night and at most MAX_STAY_NIGHTS.

    Raises:
        ValidationError: If check_out is not after check_in, or the stay is too long
    """
    if check_out <= check_in:
        raise ValidationError("Check-out date must be after check-in date")
    if (check_out - check_in).days > MAX_STAY_NIGHTS:
        raise ValidationError(f"Stays are limited to {MAX_STAY_NIGHTS} nights")


def validate_chargeable_total(total: Decimal) -> None:
    """
    Reject totals the payment provider cannot charge in a single payment.

    Raises:
        ValidationError: If the total exceeds MAX_AMOUNT_MINOR minor units
    """
    if to_minor_units(total) > MAX_AMOUNT_MINOR:
        raise ValidationError("Stay total exceeds the maximum payable amount")


def price_nights(
    base_price: Decimal,
    calendar_days: Iterable[Any],
    check_in: date,
    check_out: date,
) -> dict[date, Decimal]:
    """
    Resolve the price of every night in [check_in, check_out).

    Uses the availability overlay rule, so a night's price here is always the
    price shown for that date on the calendar. Zero or negative stays yield an
    empty mapping.
    """
    if check_out <= check_in:
        return {}
    nights = overlay_calendar(base_price, calendar_days, check_in, check_out - timedelta(days=1))
    return {night: availability.price for night, availability in nights.items()}


def quote_stay(
    conn: Connection,
    property_id: str,
    check_in: date,
    check_out: date,
    stage: str = "quote",
) -> Quote:
    """
    Compute the total price of a stay.

    Args:
        conn: Active database connection
        property_id: Property ID
        check_in: Arrival date (first charged night)
        check_out: Departure date (not charged)
        stage: Metrics label for where the price is computed
            (quote, checkout or confirmation)

    Returns:
        Quote: per-night prices and their exact sum

    Raises:
        NotFoundError: If the property does not exist
        UpstreamError: If the database query fails
    """
    try:
        prop = get_property(conn, property_id)
        if prop is None:
            raise NotFoundError("Property not found")
        calendar_days = (
            get_calendar_days(conn, property_id, check_in, check_out - timedelta(days=1))
            if check_out > check_in
            else []
        )
    except SQLAlchemyError as e:
        logger.error(
            "pricing_query_failed",
            property_id=property_id,
            check_in=check_in.isoformat(),
            check_out=check_out.isoformat(),
            error=str(e),
        )
        raise UpstreamError("Could not get pricing information") from e

    nightly = price_nights(Decimal(prop.base_price), calendar_days, check_in, check_out)
    total = sum(nightly.values(), Decimal(0))

    price_quotes.labels(stage=stage).inc()
    logger.debug(
        "stay_priced",
        property_id=property_id,
        check_in=check_in.isoformat(),
        check_out=check_out.isoformat(),
        nights=len(nightly),
        total=str(total),
        stage=stage,
    )

    return Quote(
        property_id=property_id,
        property_name=prop.name,
        check_in=check_in,
        check_out=check_out,
        nightly=nightly,
        total=total,
    )
