"""Display data for the property served by this deployment."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from villa_booking import config
from villa_booking.db.readers.properties import get_property
from villa_booking.dependencies import get_db_engine
from villa_booking.errors import NotFoundError, UpstreamError
from villa_booking.routes._booking_helpers import money

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/property")
def get_configured_property(engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    """
    Return the configured property for the landing and booking pages.

    Returns:
        dict: id, name, description, location, amenities, images, base_price

    Raises:
        NotFoundError: 404 if PROPERTY_ID is unset or names no stored property
    """
    property_id = config.PROPERTY_ID
    if not property_id:
        logger.warning("property_not_configured")
        raise NotFoundError("Property not found")

    try:
        with engine.connect() as conn:
            prop = get_property(conn, property_id)
    except Exception as e:
        logger.exception("property_lookup_failed", property_id=property_id, error=str(e))
        raise UpstreamError("Could not fetch property")

    if prop is None:
        raise NotFoundError("Property not found")

    return {
        "id": prop.id,
        "name": prop.name,
        "description": prop.description,
        "location": prop.location,
        "amenities": prop.amenities or [],
        "images": prop.images or [],
        "base_price": money(prop.base_price),
    }
