import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import logging
from decimal import Decimal

from villa_booking.config import PROPERTY_ID
from villa_booking.db.engine import engine
from villa_booking.db.writers.properties import insert_property
from villa_booking.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

DEFAULT_PROPERTY = {
    "name": "Ocean View Villa",
    "description": (
        "A beautiful villa with stunning ocean views, perfect for your vacation getaway."
    ),
    "location": "Malibu, California",
    "amenities": ["WiFi", "Pool", "Kitchen", "Air conditioning", "Beach access"],
    "images": [
        "https://images.unsplash.com/photo-1580587771525-78b9dba3b914?w=800&auto=format&fit=crop",
        "https://images.unsplash.com/photo-1562182384-08115de5ee97?w=800&auto=format&fit=crop",
        "https://images.unsplash.com/photo-1484154218962-a197022b5858?w=800&auto=format&fit=crop",
        "https://images.unsplash.com/photo-1522708323590-d24dbb6b0267?w=800&auto=format&fit=crop",
    ],
    "base_price": Decimal("299.99"),
}


def main() -> None:
    """
    Create the property named by PROPERTY_ID if it does not exist yet.
    """
    parser = argparse.ArgumentParser(description="Seed the rental property")
    parser.add_argument("--property-id", default=PROPERTY_ID)
    parser.add_argument("--owner-id", default=None)
    parser.add_argument("--dry-run", action="store_true")
    args = parser.parse_args()

    if not args.property_id:
        parser.error("PROPERTY_ID is not set; pass --property-id")

    logger.info("Seeding property_id=%s", args.property_id)

    try:
        insert_property(
            engine,
            {**DEFAULT_PROPERTY, "id": args.property_id, "owner_id": args.owner_id},
            dry_run=args.dry_run,
        )
    except Exception:
        logger.exception("Seeding failed for property_id=%s", args.property_id)
        raise


if __name__ == "__main__":
    main()
