"""
Availability & pricing resolver.

Turns the sparse calendar table into a dense per-night map: every night in the
requested window is open at the property's base price unless a calendar row
says otherwise. The same overlay rule feeds the price calculator, so the
calendar a guest sees and the amount they are charged cannot diverge.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable, Optional

import structlog
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from villa_booking.config import AVAILABILITY_WINDOW_DAYS, MAX_AVAILABILITY_RANGE_DAYS
from villa_booking.db.readers.bookings import get_booked_nights
from villa_booking.db.readers.calendar import get_calendar_days, get_unavailable_dates
from villa_booking.db.readers.properties import get_property
from villa_booking.errors import NotFoundError, UpstreamError, ValidationError
from villa_booking.models.calendar import UNAVAILABLE_STATUSES
from villa_booking.utils.datetime import iter_dates

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NightAvailability:
    available: bool
    price: Decimal


@dataclass(frozen=True)
class AvailabilityWindow:
    property_id: str
    base_price: Decimal
    nights: dict[date, NightAvailability]


def default_window(
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None,
) -> tuple[date, date]:
    """
    Fill in an omitted window bound.

    start defaults to today; end defaults to AVAILABILITY_WINDOW_DAYS after
    start.

    Raises:
        ValidationError: If start is so late that no window fits after it
    """
    start = start or today or date.today()
    if end is None:
        try:
            end = start + timedelta(days=AVAILABILITY_WINDOW_DAYS)
        except OverflowError as e:
            raise ValidationError("startDate is out of range") from e
    return start, end


def validate_window(start: date, end: date) -> None:
    """Reject reversed or oversized windows."""
    if start > end:
        raise ValidationError("startDate must not be after endDate")
    if (end - start).days > MAX_AVAILABILITY_RANGE_DAYS:
        raise ValidationError(
            f"Date range must not exceed {MAX_AVAILABILITY_RANGE_DAYS} days"
        )


def overlay_calendar(
    base_price: Decimal,
    calendar_days: Iterable[Any],
    start: date,
    end: date,
) -> dict[date, NightAvailability]:
    """
    Build the per-night map for [start, end] inclusive.

    Args:
        base_price: Property's default nightly rate
        calendar_days: Rows with date, status and price attributes
        start: First date (inclusive)
        end: Last date (inclusive)

    Returns:
        dict: date -> NightAvailability, one entry per date in the window
    """
    nights = {
        d: NightAvailability(available=True, price=base_price) for d in iter_dates(start, end)
    }

    for day in calendar_days:
        if day.date < start or day.date > end:
            continue
        nights[day.date] = NightAvailability(
            available=day.status not in UNAVAILABLE_STATUSES,
            price=Decimal(day.price) if day.price is not None else base_price,
        )

    return nights


def resolve_availability(
    conn: Connection, property_id: str, start: date, end: date
) -> AvailabilityWindow:
    """
    Resolve availability and nightly prices for a property.

    Args:
        conn: Active database connection
        property_id: Property ID
        start: First date (inclusive)
        end: Last date (inclusive)

    Returns:
        AvailabilityWindow: base price and the per-night map

    Raises:
        ValidationError: If the window is reversed or too wide
        NotFoundError: If the property does not exist
        UpstreamError: If the database query fails
    """
    validate_window(start, end)

    try:
        prop = get_property(conn, property_id)
        if prop is None:
            raise NotFoundError("Property not found")
        base_price = Decimal(prop.base_price)
        calendar_days = get_calendar_days(conn, property_id, start, end)
    except SQLAlchemyError as e:
        logger.error(
            "availability_query_failed",
            property_id=property_id,
            start=start.isoformat(),
            end=end.isoformat(),
            error=str(e),
        )
        raise UpstreamError("Could not fetch availability") from e

    return AvailabilityWindow(
        property_id=property_id,
        base_price=base_price,
        nights=overlay_calendar(base_price, calendar_days, start, end),
    )


def find_unavailable_nights(
    conn: Connection, property_id: str, check_in: date, check_out: date
) -> list[date]:
    """
    Nights of [check_in, check_out) that cannot be booked.

    A night is taken when its calendar row is booked or blocked, or when a
    confirmed booking already covers it.

    Args:
        conn: Active database connection
        property_id: Property ID
        check_in: First night of the stay
        check_out: Departure date (exclusive)

    Returns:
        list[date]: Taken nights, ascending (empty when the stay is bookable)
    """
    taken = set(get_unavailable_dates(conn, property_id, check_in, check_out))
    taken |= get_booked_nights(conn, property_id, check_in, check_out)
    return sorted(taken)
