"""
Domain package for the FinOrbit pipeline.

Exports the transaction and envelope models shared by the producer and the
consumer. Keep this package focused on data definitions and validation.
"""

from finorbit.domain.models import (
    NotificationEnvelope,
    Transaction,
    TransactionEvent,
    TransactionRequest,
    TransactionType,
)

__all__ = [
    "NotificationEnvelope",
    "Transaction",
    "TransactionEvent",
    "TransactionRequest",
    "TransactionType",
]
