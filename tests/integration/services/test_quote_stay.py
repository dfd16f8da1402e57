"""Integration tests for stay pricing."""

from datetime import date
from decimal import Decimal
from typing import Callable

import pytest
from sqlalchemy.engine import Engine

from villa_booking.errors import NotFoundError
from villa_booking.services.availability import resolve_availability
from villa_booking.services.pricing import quote_stay


@pytest.mark.integration
def test_total_is_sum_of_nightly_prices(
    db_engine: Engine, property_id: str, set_calendar_day: Callable[..., None]
) -> None:
    """Base 100, one night overridden to 150: three nights cost 350."""
    set_calendar_day(property_id, date(2030, 6, 2), price=Decimal("150.00"))

    with db_engine.connect() as conn:
        quote = quote_stay(conn, property_id, date(2030, 6, 1), date(2030, 6, 4))

    assert quote.nights == 3
    assert quote.total == Decimal("350.00")
    assert quote.amount_minor == 35000
    assert quote.property_name == "Ocean View Villa"


@pytest.mark.integration
def test_quote_matches_displayed_calendar(
    db_engine: Engine, property_id: str, set_calendar_day: Callable[..., None]
) -> None:
    """Every charged night costs exactly what the calendar shows for it."""
    set_calendar_day(property_id, date(2030, 7, 3), price=Decimal("210.50"))
    set_calendar_day(property_id, date(2030, 7, 5), price=Decimal("99.99"))

    with db_engine.connect() as conn:
        quote = quote_stay(conn, property_id, date(2030, 7, 1), date(2030, 7, 8))
        window = resolve_availability(conn, property_id, date(2030, 7, 1), date(2030, 7, 7))

    assert quote.nightly == {night: info.price for night, info in window.nights.items()}
    assert quote.total == sum((info.price for info in window.nights.values()), Decimal(0))


@pytest.mark.integration
def test_quote_unknown_property(db_engine: Engine) -> None:
    with db_engine.connect() as conn:
        with pytest.raises(NotFoundError):
            quote_stay(conn, "no-such-villa", date(2030, 6, 1), date(2030, 6, 4))
