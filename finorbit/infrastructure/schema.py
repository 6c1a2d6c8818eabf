"""
Schema provisioning and row persistence for `public.transactions`.

`ensure_table_exists` is idempotent: an existing table is left untouched and
a concurrent creator winning the race counts as success. Failures are raised
as `SchemaProvisioningError`; deciding that they are fatal is left to the
entry points.
"""

from __future__ import annotations

import psycopg
from psycopg import errors as pg_errors

from finorbit.domain.models import Transaction
from finorbit.utils.logging import get_logger

log = get_logger(__name__)

TABLE_SCHEMA = "public"
TABLE_NAME = "transactions"

CHECK_TABLE_SQL = """
SELECT EXISTS (
    SELECT FROM information_schema.tables
    WHERE table_schema = %s AND table_name = %s
);
"""

CREATE_EXTENSION_SQL = 'CREATE EXTENSION IF NOT EXISTS "uuid-ossp";'

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS public.transactions (
    id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
    user_id UUID NOT NULL,
    amount NUMERIC(12,2) NOT NULL,
    type VARCHAR(50) NOT NULL,
    timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""

INSERT_TRANSACTION_SQL = """
INSERT INTO public.transactions (user_id, amount, type, timestamp)
VALUES (%s, %s, %s, COALESCE(%s::timestamp, CURRENT_TIMESTAMP));
"""

# Raised when another process created the table (or its row type) first.
_ALREADY_EXISTS = (
    pg_errors.DuplicateTable,
    pg_errors.DuplicateObject,
    pg_errors.UniqueViolation,
)


class ProvisioningError(RuntimeError):
    """The worker cannot obtain a usable database; restarting is the remedy."""


class SchemaProvisioningError(ProvisioningError):
    """Checking for or creating the transactions table failed."""


def table_exists(conn: psycopg.Connection) -> bool:
    """Return whether `public.transactions` is present in the catalog."""
    try:
        row = conn.execute(CHECK_TABLE_SQL, (TABLE_SCHEMA, TABLE_NAME)).fetchone()
    except psycopg.Error as exc:
        raise SchemaProvisioningError(
            f"failed to check whether table '{TABLE_NAME}' exists: {exc}"
        ) from exc
    return bool(row and row[0])


def ensure_table_exists(conn: psycopg.Connection) -> bool:
    """
    Create `public.transactions` unless it already exists.

    Parameters
    ----------
    conn : psycopg.Connection
        Open connection, expected in autocommit mode.

    Returns
    -------
    bool
        True if this call created the table, False if it was already there.

    Raises
    ------
    SchemaProvisioningError
        If the existence check or the creation fails.
    """
    if table_exists(conn):
        log.info(
            "Table already exists, nothing to provision",
            extra={"table": f"{TABLE_SCHEMA}.{TABLE_NAME}"},
        )
        return False

    try:
        with conn.transaction():
            conn.execute(CREATE_EXTENSION_SQL)
            conn.execute(CREATE_TABLE_SQL)
    except _ALREADY_EXISTS:
        log.info(
            "Table created concurrently by another worker",
            extra={"table": f"{TABLE_SCHEMA}.{TABLE_NAME}"},
        )
        return False
    except psycopg.Error as exc:
        raise SchemaProvisioningError(f"failed to create table '{TABLE_NAME}': {exc}") from exc

    log.info("Table created", extra={"table": f"{TABLE_SCHEMA}.{TABLE_NAME}"})
    return True


def insert_transaction(conn: psycopg.Connection, tx: Transaction) -> None:
    """
    Insert one transaction row.

    The amount is bound as text so the NUMERIC column receives the exact
    decimal digits. Raises `psycopg.Error` on failure.
    """
    conn.execute(
        INSERT_TRANSACTION_SQL,
        (tx.user_id, str(tx.amount), tx.type, tx.timestamp),
    )


__all__ = [
    "CHECK_TABLE_SQL",
    "CREATE_EXTENSION_SQL",
    "CREATE_TABLE_SQL",
    "INSERT_TRANSACTION_SQL",
    "ProvisioningError",
    "SchemaProvisioningError",
    "ensure_table_exists",
    "insert_transaction",
    "table_exists",
]
