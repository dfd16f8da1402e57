from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.engine import Engine

from villa_booking.config import CURRENCY
from villa_booking.dependencies import get_db_engine
from villa_booking.errors import BookingError, NotFoundError, UpstreamError, ValidationError
from villa_booking.metrics import availability_requests
from villa_booking.routes._booking_helpers import (
    money,
    parse_date_param,
    parse_required_date,
    require_param,
)
from villa_booking.services.availability import default_window, resolve_availability
from villa_booking.services.pricing import (
    quote_stay,
    validate_chargeable_total,
    validate_stay_dates,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/availability")
def get_availability(
    property_id: Optional[str] = Query(None, alias="propertyId"),
    start_date: Optional[str] = Query(None, alias="startDate", description="yyyy-MM-dd"),
    end_date: Optional[str] = Query(None, alias="endDate", description="yyyy-MM-dd"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Availability and nightly price for every date in a window.

    Defaults to today through 90 days ahead. Dates without a calendar entry
    are available at the base price.

    Args:
        property_id: Property ID (required)
        start_date: First date, inclusive (optional)
        end_date: Last date, inclusive (optional)

    Returns:
        dict: {"property_id", "base_price", "dates": {"yyyy-MM-dd": {"available", "price"}}}
    """
    try:
        pid = require_param(property_id, "propertyId", "Missing property ID")
        start, end = default_window(
            parse_date_param(start_date, "startDate"),
            parse_date_param(end_date, "endDate"),
        )

        with engine.connect() as conn:
            window = resolve_availability(conn, pid, start, end)

    except ValidationError:
        availability_requests.labels(status="invalid").inc()
        raise
    except NotFoundError:
        availability_requests.labels(status="not_found").inc()
        raise
    except BookingError:
        availability_requests.labels(status="error").inc()
        raise
    except Exception as e:
        availability_requests.labels(status="error").inc()
        logger.exception("availability_failed", property_id=property_id, error=str(e))
        raise UpstreamError("Could not fetch availability")

    availability_requests.labels(status="success").inc()

    return {
        "property_id": window.property_id,
        "base_price": money(window.base_price),
        "dates": {
            night.isoformat(): {"available": info.available, "price": money(info.price)}
            for night, info in window.nights.items()
        },
    }


@router.get("/booking/quote")
def get_quote(
    property_id: Optional[str] = Query(None, alias="propertyId"),
    check_in: Optional[str] = Query(None, alias="checkIn", description="yyyy-MM-dd"),
    check_out: Optional[str] = Query(None, alias="checkOut", description="yyyy-MM-dd"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """
    Price a stay the way checkout will charge it.

    Returns:
        dict: Per-night prices, night count and total for [checkIn, checkOut)
    """
    pid = require_param(property_id, "propertyId", "Missing property ID")
    arrival = parse_required_date(check_in, "checkIn")
    departure = parse_required_date(check_out, "checkOut")

    validate_stay_dates(arrival, departure)

    try:
        with engine.connect() as conn:
            quote = quote_stay(conn, pid, arrival, departure)
    except BookingError:
        raise
    except Exception as e:
        logger.exception("quote_failed", property_id=pid, error=str(e))
        raise UpstreamError("Could not get pricing information")

    validate_chargeable_total(quote.total)

    return {
        "property_id": quote.property_id,
        "check_in": quote.check_in.isoformat(),
        "check_out": quote.check_out.isoformat(),
        "nights": quote.nights,
        "nightly": {night.isoformat(): money(price) for night, price in quote.nightly.items()},
        "total_price": money(quote.total),
        "currency": CURRENCY,
    }
