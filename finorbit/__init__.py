"""
FinOrbit - event pipeline for monetary transactions.

A producer Lambda validates HTTP requests and publishes transaction events to
SNS; a consumer Lambda receives them through SQS and stores them in
PostgreSQL, creating the table on first use:

- `finorbit.producer.handler.lambda_handler` (API Gateway HTTP API)
- `finorbit.consumer.handler.lambda_handler` (SQS event source)
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from finorbit.config import Settings, get_settings
from finorbit.consumer.decoder import Skip, decode_message
from finorbit.consumer.ingestion import BatchReport, process_batch
from finorbit.domain.models import Transaction, TransactionEvent, TransactionType
from finorbit.infrastructure.db_factory import ConnectionProvisioner, get_provisioner
from finorbit.infrastructure.schema import ProvisioningError, ensure_table_exists
from finorbit.producer.validation import RequestValidationError, validate_request
from finorbit.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Transaction",
    "TransactionEvent",
    "TransactionType",
    # Consumer
    "BatchReport",
    "Skip",
    "decode_message",
    "process_batch",
    # Infrastructure
    "ConnectionProvisioner",
    "ProvisioningError",
    "ensure_table_exists",
    "get_provisioner",
    # Producer
    "RequestValidationError",
    "validate_request",
    # Logging
    "configure_logging",
    "get_logger",
]
