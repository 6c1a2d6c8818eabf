"""
Pytest configuration for the FinOrbit pipeline.

Provides fixtures for:
- Environment and cached-singleton isolation between tests
- In-memory fakes of a psycopg connection for unit tests
- Database connection management for integration tests
"""

from __future__ import annotations

import json
import os
from contextlib import AbstractContextManager
from typing import Any, Callable, Generator, Optional

import psycopg
import pytest

from finorbit.config import Settings, get_settings
from finorbit.infrastructure.db_factory import reset_provisioner
from finorbit.infrastructure.publisher import set_publisher

_ENV_VARS = (
    "DB_HOST",
    "DB_PORT",
    "DB_USER",
    "DB_PASS",
    "DB_NAME",
    "DB_SSLMODE",
    "DB_CONNECT_TIMEOUT",
    "SNS_TOPIC_ARN",
    "AWS_REGION",
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_JSON",
)


@pytest.fixture(autouse=True)
def _isolated_process_state(monkeypatch) -> Generator[None, None, None]:
    """
    Start every test from a clean environment and fresh process-wide singletons.

    Entry points normally reconfigure the root logger; that is disabled here so
    pytest's own log capture stays installed.
    """
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("finorbit.consumer.handler.configure_logging", lambda **_: None)
    monkeypatch.setattr("finorbit.producer.handler.configure_logging", lambda **_: None)
    monkeypatch.setattr("finorbit.main.configure_logging", lambda **_: None)

    get_settings.cache_clear()
    reset_provisioner()
    set_publisher(None)
    yield
    get_settings.cache_clear()
    reset_provisioner()
    set_publisher(None)


# ---------------------------------------------------------------------------
# Unit-test fakes
# ---------------------------------------------------------------------------


class FakeCursor:
    def __init__(self, row: Optional[tuple] = None) -> None:
        self._row = row

    def fetchone(self) -> Optional[tuple]:
        return self._row


class FakeTransaction(AbstractContextManager["FakeTransaction"]):
    def __init__(self, conn: "FakeConnection") -> None:
        self._conn = conn

    def __enter__(self) -> "FakeTransaction":
        self._conn.transactions += 1
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        del exc, tb
        if exc_type is not None:
            self._conn.rollbacks += 1
        return False


class FakeConnection:
    """
    Records every statement; answers the catalog check and stores inserts.

    `fail_on` maps an SQL fragment to the exception raised when a statement
    containing it is executed. `failing_inserts` holds 1-based insert call
    numbers that raise a unique violation.
    """

    def __init__(self, table_exists: bool = True) -> None:
        self.table_exists = table_exists
        self.executed: list[tuple[str, Any]] = []
        self.fail_on: dict[str, Exception] = {}
        self.failing_inserts: set[int] = set()
        self.rows: list[tuple] = []
        self.transactions = 0
        self.rollbacks = 0
        self.closed = False
        self._insert_calls = 0

    def execute(self, sql: str, params: Any = None) -> FakeCursor:
        self.executed.append((sql, params))
        for fragment, exc in self.fail_on.items():
            if fragment in sql:
                raise exc
        if "information_schema.tables" in sql:
            return FakeCursor((self.table_exists,))
        if "CREATE TABLE" in sql:
            self.table_exists = True
        if "INSERT INTO" in sql:
            self._insert_calls += 1
            if self._insert_calls in self.failing_inserts:
                raise psycopg.errors.UniqueViolation("duplicate key value")
            self.rows.append(tuple(params))
        return FakeCursor((1,))

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)

    def close(self) -> None:
        self.closed = True

    def statements(self, fragment: str) -> list[str]:
        return [sql for sql, _ in self.executed if fragment in sql]


class FakeConnect:
    """Stand-in for `psycopg.connect` that hands out one FakeConnection."""

    def __init__(self, conn: FakeConnection, error: Optional[Exception] = None) -> None:
        self.conn = conn
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def __call__(self, dsn: str, **kwargs: Any) -> FakeConnection:
        self.calls.append((dsn, kwargs))
        if self.error is not None:
            raise self.error
        return self.conn


@pytest.fixture
def online_settings() -> Settings:
    """Settings that allow real connections (used with fakes only)."""
    return Settings(
        db_host="db.internal",
        db_user="finorbit",
        db_password="secret",
        db_name="finorbit",
        app_env="production",
        sns_topic_arn="arn:aws:sns:us-east-1:123456789012:test-topic",
    )


@pytest.fixture
def offline_settings() -> Settings:
    return Settings(
        app_env="test",
        sns_topic_arn="arn:aws:sns:us-east-1:123456789012:test-topic",
    )


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def make_fake_connect() -> Callable[..., FakeConnect]:
    def _make(conn: Optional[FakeConnection] = None, error: Optional[Exception] = None) -> FakeConnect:
        return FakeConnect(conn or FakeConnection(), error=error)

    return _make


@pytest.fixture
def sns_body() -> Callable[..., str]:
    """Build an SQS body: an SNS envelope whose Message is the given transaction."""

    def _build(**overrides: Any) -> str:
        transaction = {
            "user_id": "user-123",
            "amount": "100.00",
            "type": "deposit",
            "timestamp": "2025-11-07T00:00:00Z",
        }
        transaction.update(overrides)
        return json.dumps({"Type": "Notification", "Message": json.dumps(transaction)})

    return _build


# ---------------------------------------------------------------------------
# Integration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("TEST_DB_HOST", "localhost"),
        db_port=int(os.getenv("TEST_DB_PORT", "5432")),
        db_user=os.getenv("TEST_DB_USER", "postgres"),
        db_password=os.getenv("TEST_DB_PASS", "postgres"),
        db_name=os.getenv("TEST_DB_NAME", "finorbit"),
        db_sslmode=os.getenv("TEST_DB_SSLMODE", "disable"),
        app_env="integration",
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    from finorbit.infrastructure.db_factory import build_dsn

    return build_dsn(test_settings)


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped autocommit connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def dropped_transactions_table(db_connection: psycopg.Connection):
    """
    Drop the transactions table before and after each test function.

    Every test starts from a database where provisioning has not run yet.
    """
    db_connection.execute("DROP TABLE IF EXISTS public.transactions;")
    yield
    db_connection.execute("DROP TABLE IF EXISTS public.transactions;")
