import json
import logging
from typing import Any

from sqlalchemy.engine import Engine

from villa_booking.config import DEBUG
from villa_booking.db.writers._upsert import insert_or_ignore
from villa_booking.models.properties import Property
from villa_booking.utils.datetime import utc_now

logger = logging.getLogger(__name__)


def insert_property(engine: Engine, data: dict[str, Any], dry_run: bool = False) -> bool:
    """
    Create the property if it does not exist yet. Existing rows are left untouched.

    Args:
        engine (Engine): SQLAlchemy engine to open a transaction.
        data (dict[str, Any]): Property columns; must include id, name and base_price.
        dry_run (bool): If True, skip DB writes and log only.

    Returns:
        bool: True if the property was created, False if it already existed or dry_run.
    """
    now = utc_now()
    row = {
        "id": data["id"],
        "owner_id": data.get("owner_id"),
        "name": data["name"],
        "description": data.get("description"),
        "location": data.get("location"),
        "amenities": list(data.get("amenities") or []),
        "images": list(data.get("images") or []),
        "base_price": data["base_price"],
        "created_at": now,
        "updated_at": now,
    }

    if dry_run:
        logger.info("[DRY RUN] Would create property %s", row["id"])
        return False

    if DEBUG:
        logger.info(f"Property to create:\n{json.dumps(row, default=str, indent=2)}")

    with engine.begin() as conn:
        created = insert_or_ignore(conn, Property, row, conflict_columns=["id"])

    if created:
        logger.info("Created property %s", row["id"])
    else:
        logger.info("Property %s already exists", row["id"])
    return created
