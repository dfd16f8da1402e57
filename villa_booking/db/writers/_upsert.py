"""
Dialect-aware INSERT ... ON CONFLICT helpers.

PostgreSQL (production) and SQLite (tests) both support ON CONFLICT, but
through separate SQLAlchemy insert constructs. These helpers pick the right
construct for the connection so writers can express idempotent inserts and
upserts once.
"""

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection


def dialect_insert(conn: Connection, table: type) -> Any:
    """
    Return an INSERT construct that supports on_conflict_* for this connection.

    Args:
        conn: Active database connection
        table: SQLAlchemy ORM table class

    Raises:
        NotImplementedError: For dialects without ON CONFLICT support
    """
    if conn.dialect.name == "postgresql":
        return postgresql.insert(table)
    if conn.dialect.name == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"ON CONFLICT is not supported for dialect {conn.dialect.name}")


def insert_or_ignore(
    conn: Connection,
    table: type,
    row: dict[str, Any],
    conflict_columns: list[str],
) -> bool:
    """
    Insert a single row unless it collides on conflict_columns.

    The uniqueness check and the insert are one atomic statement, so two
    concurrent callers with the same key cannot both insert.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class (e.g., Booking)
        row: Column values to insert
        conflict_columns: Columns of the unique constraint that identifies the row

    Returns:
        bool: True if the row was inserted, False if it already existed

    Example:
        >>> with engine.begin() as conn:
        ...     inserted = insert_or_ignore(
        ...         conn, Booking, {...}, conflict_columns=["payment_session_id"]
        ...     )
    """
    stmt = dialect_insert(conn, table).values(row)
    stmt = stmt.on_conflict_do_nothing(index_elements=conflict_columns)
    result = conn.execute(stmt)
    return bool(result.rowcount == 1)


def upsert_rows(
    conn: Connection,
    table: type,
    rows: list[dict[str, Any]],
    conflict_columns: list[str],
    update_columns: list[str],
) -> None:
    """
    Insert rows, updating update_columns on rows that already exist.

    Columns not listed in update_columns keep their stored value on conflict.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class
        rows: List of row dicts to upsert
        conflict_columns: Columns of the unique constraint used for ON CONFLICT
        update_columns: Columns overwritten from the new row on conflict
    """
    if not rows:
        return

    stmt = dialect_insert(conn, table).values(rows)
    set_dict = {col: getattr(stmt.excluded, col) for col in update_columns}
    stmt = stmt.on_conflict_do_update(index_elements=conflict_columns, set_=set_dict)

    conn.execute(stmt)
