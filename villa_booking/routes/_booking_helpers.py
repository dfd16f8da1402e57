"""
Internal helper functions for booking route handlers.

Query-string parsing and JSON rendering shared by the availability, quote
and booking routes.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from villa_booking.errors import ValidationError
from villa_booking.utils.datetime import parse_iso_date


def require_param(value: Optional[str], name: str, message: str | None = None) -> str:
    """
    Validate that a query parameter is present, raise 400 if not.

    Args:
        value: Raw query parameter value
        name: Parameter name for the error message
        message: Override for the error message

    Raises:
        ValidationError: 400 if the value is None or blank
    """
    if value is None or not value.strip():
        raise ValidationError(message or f"Missing {name}")
    return value.strip()


def parse_date_param(value: Optional[str], name: str) -> Optional[date]:
    """
    Parse an optional yyyy-MM-dd query parameter, raise 400 if malformed.

    Args:
        value: Raw query parameter value (None when omitted)
        name: Parameter name for the error message

    Raises:
        ValidationError: 400 if the value is not a valid date
    """
    if value is None or not value.strip():
        return None
    try:
        return parse_iso_date(value.strip())
    except ValueError:
        raise ValidationError(f"Invalid {name}: expected yyyy-MM-dd")


def money(amount: Decimal) -> float:
    """Render a monetary Decimal as a JSON number."""
    return float(amount)


def serialize_booking(booking: dict[str, Any]) -> dict[str, Any]:
    """
    Convert a booking row into JSON-safe values for the confirmation page.
    """
    rendered: dict[str, Any] = {}
    for key, value in booking.items():
        if isinstance(value, Decimal):
            rendered[key] = money(value)
        elif isinstance(value, date):
            rendered[key] = value.isoformat()
        elif value is not None and not isinstance(value, (str, int, float, bool)):
            rendered[key] = str(value)
        else:
            rendered[key] = value
    return rendered


def parse_required_date(value: Optional[str], name: str) -> date:
    """Parse a mandatory yyyy-MM-dd query parameter, raise 400 if missing or malformed."""
    parsed = parse_date_param(require_param(value, name), name)
    if parsed is None:
        raise ValidationError(f"Missing {name}")
    return parsed
