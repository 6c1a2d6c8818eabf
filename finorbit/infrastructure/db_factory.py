"""
Database connection provisioning for the FinOrbit consumer.

A Lambda container keeps one PostgreSQL connection for its whole lifetime.
`ConnectionProvisioner` opens it at most once, pings it, makes sure the
transactions table exists, and caches the outcome (the connection or the
error) so every later caller, concurrent or not, observes the same result.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

import psycopg
from psycopg import Connection
from psycopg.conninfo import make_conninfo

from finorbit.config import Settings, get_settings
from finorbit.infrastructure.schema import ProvisioningError, ensure_table_exists
from finorbit.utils.logging import get_logger

log = get_logger(__name__)

ConnectFn = Callable[..., Connection]


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a libpq conninfo string from settings."""
    settings = settings or get_settings()
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        user=settings.db_user,
        password=settings.db_password,
        dbname=settings.db_name,
        sslmode=settings.db_sslmode,
        connect_timeout=settings.db_connect_timeout,
    )


class ConnectionProvisioner:
    """
    Thread-safe, one-shot initializer of the shared database connection.

    The first `acquire()` call performs the initialization while holding the
    lock; callers arriving meanwhile wait on the lock and then read the cached
    outcome. A failed initialization is cached too and re-raised on every
    call: the connection is never opened twice.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        connect: ConnectFn = psycopg.connect,
        dsn_override: Optional[str] = None,
    ) -> None:
        self._settings = settings
        self._connect = connect
        self._dsn_override = dsn_override
        self._lock = threading.Lock()
        self._initialized = False
        self._connection: Optional[Connection] = None
        self._error: Optional[ProvisioningError] = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    def acquire(self) -> Optional[Connection]:
        """
        Return the shared connection, initializing it on first use.

        Returns
        -------
        Connection | None
            The ready connection, or None in offline mode.

        Raises
        ------
        ProvisioningError
            If opening, pinging, or provisioning the schema failed.
        """
        if not self._initialized:
            with self._lock:
                if not self._initialized:
                    try:
                        self._connection = self._initialize()
                    except ProvisioningError as exc:
                        self._error = exc
                    self._initialized = True

        if self._error is not None:
            raise self._error
        return self._connection

    def _initialize(self) -> Optional[Connection]:
        settings = self._settings or get_settings()
        if settings.offline_mode:
            log.info("Offline mode enabled, skipping database connection")
            return None

        dsn = self._dsn_override or build_dsn(settings)
        try:
            conn = self._connect(dsn, autocommit=True)
        except psycopg.Error as exc:
            raise ProvisioningError(f"failed to open database connection: {exc}") from exc

        try:
            conn.execute("SELECT 1;")
            log.info(
                "Database connection established",
                extra={"db_host": settings.db_host, "db_name": settings.db_name},
            )
            ensure_table_exists(conn)
        except ProvisioningError:
            conn.close()
            raise
        except psycopg.Error as exc:
            conn.close()
            raise ProvisioningError(f"database ping failed: {exc}") from exc

        return conn


_provisioner: Optional[ConnectionProvisioner] = None
_provisioner_lock = threading.Lock()


def get_provisioner() -> ConnectionProvisioner:
    """
    Retrieve the process-wide provisioner, creating it on first use.
    """
    global _provisioner
    with _provisioner_lock:
        if _provisioner is None:
            _provisioner = ConnectionProvisioner()
        return _provisioner


def reset_provisioner() -> None:
    """Forget the process-wide provisioner (tests only; does not close connections)."""
    global _provisioner
    with _provisioner_lock:
        _provisioner = None


__all__ = [
    "ConnectionProvisioner",
    "ProvisioningError",
    "build_dsn",
    "get_provisioner",
    "reset_provisioner",
]
