# models/calendar.py

from enum import Enum

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.sql import func

from villa_booking.models.base import Base


class CalendarStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    BLOCKED = "blocked"


# Statuses that make a night unavailable to guests
UNAVAILABLE_STATUSES = (CalendarStatus.BOOKED.value, CalendarStatus.BLOCKED.value)


class CalendarDay(Base):
    """
    ORM model for per-night availability and price overrides.

    One row per (property, night). A missing row means the night is open at
    the property's base price. price, when set, overrides base_price for that
    night. booking_id records which booking marked the night as booked.
    """

    __tablename__ = "calendar"
    __table_args__ = (UniqueConstraint("property_id", "date", name="uq_calendar_property_date"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(
        String(64),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default=CalendarStatus.AVAILABLE.value)
    price = Column(Numeric(10, 2), nullable=True)
    booking_id = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
