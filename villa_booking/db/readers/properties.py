from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection, Row

from villa_booking.models.properties import Property


def get_property(conn: Connection, property_id: str) -> Optional[Row[Any]]:
    """
    Fetch a property by id.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        property_id (str): Property ID.

    Returns:
        Optional[Row]: Property row (attribute access by column name) or None if not found.
    """
    result = conn.execute(select(Property.__table__).where(Property.id == property_id))
    return result.fetchone()


def lock_property(conn: Connection, property_id: str) -> bool:
    """
    Take a row lock on the property for the rest of the current transaction.

    Serializes booking confirmations for the same property so that the
    availability re-check and the booking insert cannot interleave with
    another confirmation. SQLite ignores FOR UPDATE (it locks the whole
    database on write instead).

    Args:
        conn (Connection): Connection inside an open transaction.
        property_id (str): Property ID.

    Returns:
        bool: True if the property exists, False otherwise.
    """
    result = conn.execute(
        select(Property.id).where(Property.id == property_id).with_for_update()
    )
    return result.fetchone() is not None
