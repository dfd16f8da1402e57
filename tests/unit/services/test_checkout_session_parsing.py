"""Unit tests for reading booking parameters back from a paid checkout session."""

from datetime import date
from decimal import Decimal
from typing import Any
from unittest.mock import Mock

import pytest

from villa_booking.errors import ValidationError
from villa_booking.services.confirmation import (
    ConfirmationOutcome,
    handle_payment_event,
    parse_checkout_session,
)


def session_object(**metadata_overrides: Any) -> dict[str, Any]:
    metadata = {
        "property_id": "villa-test",
        "check_in": "2030-06-01",
        "check_out": "2030-06-04",
        "adults": "2",
        "children": "1",
        "guest_name": "Jane Guest",
        "guest_email": "jane@example.com",
        "total_price": "350.00",
    }
    metadata.update(metadata_overrides)
    return {"id": "cs_test_1", "amount_total": 35000, "metadata": metadata}


@pytest.mark.unit
def test_parse_checkout_session_returns_typed_values() -> None:
    paid = parse_checkout_session(session_object())

    assert paid.session_id == "cs_test_1"
    assert paid.check_in == date(2030, 6, 1)
    assert paid.check_out == date(2030, 6, 4)
    assert paid.adults == 2
    assert paid.children == 1
    assert paid.total_price == Decimal("350.00")
    assert paid.amount_total == 35000


@pytest.mark.unit
def test_parse_checkout_session_defaults_children_to_zero() -> None:
    session = session_object()
    del session["metadata"]["children"]

    assert parse_checkout_session(session).children == 0


@pytest.mark.unit
def test_parse_checkout_session_requires_session_id() -> None:
    session = session_object()
    session["id"] = None

    with pytest.raises(ValidationError, match="no id"):
        parse_checkout_session(session)


@pytest.mark.unit
def test_parse_checkout_session_lists_missing_metadata() -> None:
    with pytest.raises(ValidationError, match="guest_email"):
        parse_checkout_session(session_object(guest_email=""))


@pytest.mark.unit
@pytest.mark.parametrize(
    "override",
    [
        {"check_in": "06/01/2030"},
        {"adults": "two"},
        {"total_price": "lots"},
        {"adults": "0"},
        {"check_out": "2030-06-01"},
    ],
)
def test_parse_checkout_session_rejects_malformed_metadata(override: dict[str, str]) -> None:
    with pytest.raises(ValidationError):
        parse_checkout_session(session_object(**override))


@pytest.mark.unit
def test_handle_payment_event_ignores_other_event_types() -> None:
    engine = Mock()

    outcome = handle_payment_event(engine, {"id": "evt_1", "type": "payment_intent.created"})

    assert outcome is ConfirmationOutcome.IGNORED
    engine.begin.assert_not_called()
