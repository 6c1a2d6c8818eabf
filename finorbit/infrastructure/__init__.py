"""
Infrastructure package for the FinOrbit pipeline.

Centralizes I/O concerns: the shared PostgreSQL connection and its schema,
and publishing to SNS. Keep this layer focused on resource management,
decoupled from request validation and message decoding.
"""

from finorbit.infrastructure.db_factory import (
    ConnectionProvisioner,
    build_dsn,
    get_provisioner,
    reset_provisioner,
)
from finorbit.infrastructure.publisher import (
    OfflinePublisher,
    Publisher,
    SnsPublisher,
    get_publisher,
    set_publisher,
)
from finorbit.infrastructure.schema import (
    ProvisioningError,
    SchemaProvisioningError,
    ensure_table_exists,
    insert_transaction,
)

__all__ = [
    "ConnectionProvisioner",
    "OfflinePublisher",
    "ProvisioningError",
    "Publisher",
    "SchemaProvisioningError",
    "SnsPublisher",
    "build_dsn",
    "ensure_table_exists",
    "get_provisioner",
    "get_publisher",
    "insert_transaction",
    "reset_provisioner",
    "set_publisher",
]
