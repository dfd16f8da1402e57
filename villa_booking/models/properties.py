"""SQLAlchemy model for the rental property."""

from sqlalchemy import Column, DateTime, Numeric, String, Text
from sqlalchemy.sql import func

from villa_booking.models.base import Base, JSONType


class Property(Base):
    """
    ORM model for the property offered by this deployment.

    A deployment serves exactly one property, identified by PROPERTY_ID and
    created once by scripts/seed_property.py. base_price is the nightly rate
    used for every night that has no custom price in the calendar.
    """

    __tablename__ = "properties"

    id = Column(String(64), primary_key=True)
    owner_id = Column(String(64), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    amenities = Column(JSONType, nullable=False, default=list)
    images = Column(JSONType, nullable=False, default=list)
    base_price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
