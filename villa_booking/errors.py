"""
Error taxonomy for the booking service.

Each error carries the HTTP status it maps to, so route handlers can let
them propagate and a single exception handler in main.py renders the
``{"error": ...}`` body. Anything that is not a BookingError is treated as
an upstream failure by the routes.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable

from fastapi import status


class BookingError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_content(self) -> dict[str, Any]:
        """Render the JSON body returned to the caller."""
        return {"error": self.message}


class ValidationError(BookingError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(BookingError):
    """Unknown property, booking or payment session."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BookingError):
    """Requested nights overlap nights that are already taken."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, dates: Iterable[date]) -> None:
        super().__init__(message)
        self.dates = sorted(set(dates))

    def to_content(self) -> dict[str, Any]:
        return {"error": self.message, "dates": [d.isoformat() for d in self.dates]}


class AuthFailureError(BookingError):
    """Webhook signature missing, unparseable or not matching."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(BookingError):
    """Database or payment provider failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
