"""
FastAPI dependency injection providers.

Route handlers receive the database engine and the Stripe checkout client
through these providers instead of importing module globals. Each handler
opens its own short-lived connection or transaction from the engine, so no
database handle is shared between concurrent requests.

Dependencies can be overridden in tests using app.dependency_overrides, making
it easy to inject an in-memory database or a fake payment client.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Generator

from sqlalchemy.engine import Engine

from villa_booking.db.engine import engine
from villa_booking.payments.stripe_client import StripeCheckoutClient


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Example:
        >>> @router.get("/availability")
        >>> def get_availability(engine: Engine = Depends(get_db_engine)):
        ...     with engine.connect() as conn:
        ...         ...

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: sqlite_engine
    """
    yield engine


@lru_cache(maxsize=1)
def get_checkout_client() -> StripeCheckoutClient:
    """
    Provide the Stripe Checkout client used to issue payment sessions.

    One client (and its HTTP session) is built per process and shared by
    every request.

    Returns:
        StripeCheckoutClient: client configured from STRIPE_* settings
    """
    return StripeCheckoutClient()
