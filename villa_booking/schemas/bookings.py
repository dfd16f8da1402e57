from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class GuestInfo(BaseModel):
    """
    Contact details entered by the guest on the booking page.
    """

    name: str = Field(..., min_length=1, max_length=255, description="Guest full name")
    email: EmailStr = Field(..., description="Guest email for the confirmation")
    phone: Optional[str] = Field(None, description="Guest phone number (optional)")


class BookingCreatePayload(BaseModel):
    """
    Schema for starting a checkout. Field names match the booking page (camelCase).
    """

    model_config = ConfigDict(populate_by_name=True)

    property_id: str = Field(..., alias="propertyId", min_length=1, description="Property ID")
    check_in: date = Field(..., alias="checkIn", description="Arrival date (yyyy-MM-dd)")
    check_out: date = Field(
        ..., alias="checkOut", description="Departure date (yyyy-MM-dd), not charged"
    )
    adults: int = Field(..., ge=1, description="Number of adults (at least one)")
    children: int = Field(0, ge=0, description="Number of children")
    guest_info: GuestInfo = Field(..., alias="guestInfo")
