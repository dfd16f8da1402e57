"""Unit tests for the API error taxonomy."""

from datetime import date

import pytest

from villa_booking.errors import (
    AuthFailureError,
    ConflictError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "error_cls,expected_status",
    [
        (ValidationError, 400),
        (NotFoundError, 404),
        (AuthFailureError, 400),
        (UpstreamError, 500),
    ],
)
def test_error_status_codes(error_cls: type, expected_status: int) -> None:
    error = error_cls("boom")

    assert error.status_code == expected_status
    assert error.to_content() == {"error": "boom"}


@pytest.mark.unit
def test_conflict_error_lists_sorted_unique_dates() -> None:
    error = ConflictError(
        "Some dates are not available",
        [date(2030, 6, 3), date(2030, 6, 1), date(2030, 6, 3)],
    )

    assert error.status_code == 400
    assert error.to_content() == {
        "error": "Some dates are not available",
        "dates": ["2030-06-01", "2030-06-03"],
    }
