"""
Decoding of SQS message bodies into transactions.

A body is an SNS notification envelope whose `Message` field holds the
transaction JSON published by the producer. The two layers are parsed by
separate functions; `decode_message` composes them and turns every failure
into a `Skip` so one bad message never interrupts a batch.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from pydantic import ValidationError

from finorbit.domain.models import NotificationEnvelope, Transaction


class MessageDecodeError(ValueError):
    """A message layer could not be parsed."""


@dataclass(frozen=True)
class Skip:
    """Nothing to persist for this message; `reason` says why."""

    reason: str


DecodeResult = Union[Transaction, Skip]

NO_MESSAGE_REASON = "notification envelope has no Message"


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "<root>"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def parse_envelope(body: str) -> NotificationEnvelope:
    """Parse an SQS body as an SNS notification envelope."""
    try:
        return NotificationEnvelope.model_validate_json(body)
    except ValidationError as exc:
        raise MessageDecodeError(f"invalid notification envelope: {_summarize(exc)}") from exc


def parse_transaction(message: str) -> Transaction:
    """
    Parse the envelope's `Message` text as a transaction.

    JSON numbers are read straight into `Decimal` so an unquoted amount keeps
    every digit it was published with.
    """
    try:
        payload = json.loads(message, parse_float=Decimal, parse_constant=Decimal)
    except json.JSONDecodeError as exc:
        raise MessageDecodeError(f"invalid transaction payload: {exc}") from exc

    try:
        return Transaction.model_validate(payload)
    except ValidationError as exc:
        raise MessageDecodeError(f"invalid transaction payload: {_summarize(exc)}") from exc


def decode_message(body: str) -> DecodeResult:
    """
    Unwrap one SQS body into a `Transaction`, or a `Skip` when it can't be.

    Amount sign and type tag are not checked here; the producer validated
    them before publishing.
    """
    try:
        envelope = parse_envelope(body)
    except MessageDecodeError as exc:
        return Skip(str(exc))

    if not envelope.message:
        return Skip(NO_MESSAGE_REASON)

    try:
        return parse_transaction(envelope.message)
    except MessageDecodeError as exc:
        return Skip(str(exc))


__all__ = [
    "DecodeResult",
    "MessageDecodeError",
    "Skip",
    "decode_message",
    "parse_envelope",
    "parse_transaction",
]
