# models/bookings.py

from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Uuid,
)
from sqlalchemy.sql import func

from villa_booking.models.base import Base


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"


class Booking(Base):
    """
    ORM model for guest bookings.

    A booking is created exactly once per completed Stripe Checkout session;
    payment_session_id is the idempotency key and is unique. check_out is
    exclusive: the night of check_out is neither booked nor charged.
    total_price is the amount the guest was quoted and charged.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_check_out_after_check_in"),
        CheckConstraint("adults >= 1", name="ck_bookings_adults_positive"),
        CheckConstraint("children >= 0", name="ck_bookings_children_non_negative"),
    )

    id = Column(Uuid, primary_key=True)
    property_id = Column(
        String(64),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    guest_name = Column(String(255), nullable=False)
    guest_email = Column(String(255), nullable=False)
    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    adults = Column(Integer, nullable=False)
    children = Column(Integer, nullable=False, default=0)
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(16), nullable=False, default=BookingStatus.CONFIRMED.value)
    payment_session_id = Column(String(255), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
