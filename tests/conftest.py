"""
Shared fixtures for the test suite.

Settings are read at import time, so the environment is prepared before any
villa_booking module is imported. Every test gets a fresh in-memory SQLite
database; routes reach it through app.dependency_overrides.
"""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("PROPERTY_ID", "villa-test")
os.environ.setdefault("HOST_URL", "http://localhost:3000")

import hashlib  # noqa: E402
import hmac  # noqa: E402
import json  # noqa: E402
import time  # noqa: E402
from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any, Callable, Generator, Optional  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from villa_booking.db.writers.properties import insert_property  # noqa: E402
from villa_booking.dependencies import get_checkout_client, get_db_engine  # noqa: E402
from villa_booking.main import app  # noqa: E402
from villa_booking.models.base import Base  # noqa: E402
from villa_booking.models.calendar import CalendarDay  # noqa: E402
from villa_booking.payments.stripe_client import CheckoutSession, StripeCheckoutClient  # noqa: E402

TEST_PROPERTY_ID = os.environ["PROPERTY_ID"]
WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]


@pytest.fixture
def db_engine() -> Generator[Engine, None, None]:
    """Fresh in-memory SQLite database with all tables created."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def property_id(db_engine: Engine) -> str:
    """Seed the test property (base price 100.00) and return its id."""
    insert_property(
        db_engine,
        {
            "id": TEST_PROPERTY_ID,
            "name": "Ocean View Villa",
            "description": "Test villa",
            "location": "Malibu, California",
            "amenities": ["WiFi", "Pool"],
            "images": ["https://example.com/villa.jpg"],
            "base_price": Decimal("100.00"),
        },
    )
    return TEST_PROPERTY_ID


@pytest.fixture
def set_calendar_day(db_engine: Engine) -> Callable[..., None]:
    """Return a helper that stores one calendar row."""

    def _set(
        property_id: str,
        day: date,
        status: str = "available",
        price: Optional[Decimal] = None,
    ) -> None:
        with db_engine.begin() as conn:
            conn.execute(
                CalendarDay.__table__.insert().values(
                    property_id=property_id, date=day, status=status, price=price
                )
            )

    return _set


@pytest.fixture
def checkout_client() -> Mock:
    """Stripe Checkout client stand-in returning a fixed session."""
    client = Mock(spec=StripeCheckoutClient)
    client.create_session.return_value = CheckoutSession(
        id="cs_test_123", url="https://checkout.stripe.com/c/pay/cs_test_123"
    )
    return client


@pytest.fixture
def client(db_engine: Engine, checkout_client: Mock) -> Generator[TestClient, None, None]:
    """FastAPI test client wired to the in-memory database and fake Stripe client."""
    app.dependency_overrides[get_db_engine] = lambda: db_engine
    app.dependency_overrides[get_checkout_client] = lambda: checkout_client

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def sign_payload() -> Callable[..., str]:
    """Return a helper that builds a valid Stripe-Signature header for a body."""

    def _sign(payload: str, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
        ts = int(time.time()) if timestamp is None else timestamp
        signature = hmac.new(
            secret.encode("utf-8"), f"{ts}.{payload}".encode("utf-8"), hashlib.sha256
        ).hexdigest()
        return f"t={ts},v1={signature}"

    return _sign


@pytest.fixture
def checkout_event() -> Callable[..., dict[str, Any]]:
    """Return a helper that builds a checkout.session.completed event."""

    def _event(
        session_id: str = "cs_test_123",
        check_in: str = "2030-06-01",
        check_out: str = "2030-06-04",
        total_price: str = "300.00",
        property_id: str = TEST_PROPERTY_ID,
        **metadata_overrides: str,
    ) -> dict[str, Any]:
        metadata = {
            "property_id": property_id,
            "check_in": check_in,
            "check_out": check_out,
            "adults": "2",
            "children": "1",
            "guest_name": "Jane Guest",
            "guest_email": "jane@example.com",
            "total_price": total_price,
            **metadata_overrides,
        }
        return {
            "id": f"evt_{session_id}",
            "type": "checkout.session.completed",
            "data": {
                "object": {
                    "id": session_id,
                    "object": "checkout.session",
                    "amount_total": int(Decimal(total_price) * 100),
                    "metadata": metadata,
                }
            },
        }

    return _event


def dump_event(event: dict[str, Any]) -> str:
    """Serialize an event the way it is sent over the wire."""
    return json.dumps(event, separators=(",", ":"))


@pytest.fixture
def encode_event() -> Callable[[dict[str, Any]], str]:
    return dump_event
