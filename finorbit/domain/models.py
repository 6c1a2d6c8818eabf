"""
Domain models for the FinOrbit pipeline.

Defines the transaction payload exchanged between the producer and the
consumer, the HTTP request body the producer accepts, and the SNS
notification envelope the consumer unwraps. Amounts are always
`decimal.Decimal`; they never pass through a float.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


class Transaction(BaseModel):
    """
    Transaction as published on the topic and stored in `public.transactions`.

    Business rules (positive amount, known type) are enforced by the producer
    before publishing; this model only checks structure and field types.
    """

    user_id: str = Field(..., description="Identifier assigned by the producer (UUID text).")
    amount: Decimal = Field(..., description="Monetary amount, exact decimal.")
    type: str = Field(..., description="Transaction kind, normally deposit or withdraw.")
    timestamp: Optional[str] = Field(
        None, description="UTC creation time; the database defaults it when absent."
    )

    model_config = {
        "frozen": True,
        "extra": "ignore",
    }


class TransactionEvent(Transaction):
    """
    Event built by the producer once a request passed validation.
    """

    @classmethod
    def create(cls, user_id: str, amount: Decimal, kind: TransactionType) -> "TransactionEvent":
        return cls(
            user_id=user_id,
            amount=amount,
            type=kind.value,
            timestamp=datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT),
        )


class TransactionRequest(BaseModel):
    """Body of the producer's HTTP request."""

    amount: str = ""
    type: str = ""

    model_config = {
        "strict": True,
        "extra": "ignore",
    }


class NotificationEnvelope(BaseModel):
    """
    SNS notification as delivered inside an SQS message body.

    Only `Message` matters to the consumer; the delivery metadata is kept for
    logging.
    """

    message: Optional[str] = Field(None, alias="Message")
    type: Optional[str] = Field(None, alias="Type")
    message_id: Optional[str] = Field(None, alias="MessageId")
    topic_arn: Optional[str] = Field(None, alias="TopicArn")
    timestamp: Optional[str] = Field(None, alias="Timestamp")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "ignore",
    }


__all__ = [
    "NotificationEnvelope",
    "TIMESTAMP_FORMAT",
    "Transaction",
    "TransactionEvent",
    "TransactionRequest",
    "TransactionType",
]
