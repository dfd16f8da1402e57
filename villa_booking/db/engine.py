"""
SQLAlchemy engine singleton with production-ready connection pooling.

This module creates a single engine instance shared by all requests. Request
handlers never share a connection: each one checks out its own connection or
transaction from the pool (see villa_booking.dependencies). Every database
interaction is bounded: connecting, waiting for a pooled connection, and each
statement all time out after DB_TIMEOUT_SECONDS.
"""

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from villa_booking.config import DATABASE_URL, DB_TIMEOUT_SECONDS

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")


def _engine_options(url: str) -> dict[str, Any]:
    """
    Build pool and timeout options for the configured database.

    SQLite (used by the test suite) manages its own pool and has no
    statement timeout, so only the PostgreSQL options are dialect specific.
    """
    if url.startswith("sqlite"):
        return {}

    return {
        "pool_size": 10,  # Number of connections to maintain in the pool
        "max_overflow": 20,  # Additional connections when pool is exhausted
        "pool_timeout": DB_TIMEOUT_SECONDS,  # Wait for a free pooled connection
        "pool_pre_ping": True,  # Verify connections before using (detect stale connections)
        "pool_recycle": 3600,  # Recycle connections after 1 hour
        "connect_args": {
            "connect_timeout": DB_TIMEOUT_SECONDS,
            "options": f"-c statement_timeout={DB_TIMEOUT_SECONDS * 1000}",
        },
    }


engine: Engine = create_engine(
    DATABASE_URL,
    future=True,
    echo=False,
    **_engine_options(DATABASE_URL),
)


def check_engine_health(db_engine: Engine | None = None) -> bool:
    """
    Check if database engine is healthy and connections are working.

    This function is used by the /ready endpoint to verify database
    connectivity before allowing traffic to the service.

    Args:
        db_engine: Engine to check (defaults to the module singleton)

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with (db_engine or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
