"""
Validation of the producer's HTTP request.

Each rejection carries the HTTP status and a short reason for the caller.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from pydantic import ValidationError

from finorbit.domain.models import TransactionRequest, TransactionType

ALLOWED_METHOD = "POST"

# Plain ASCII decimal literal: no spaces, underscores or non-ASCII digits.
_AMOUNT_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


class RequestValidationError(ValueError):
    """The request cannot be turned into a transaction event."""

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__(reason)
        self.status_code = status_code
        self.reason = reason


@dataclass(frozen=True)
class ValidatedRequest:
    amount: Decimal
    kind: TransactionType


def parse_amount(raw: str) -> Decimal:
    if _AMOUNT_PATTERN.fullmatch(raw) is None:
        raise RequestValidationError(400, "invalid amount")
    try:
        amount = Decimal(raw)
    except InvalidOperation as exc:
        raise RequestValidationError(400, "invalid amount") from exc
    if not amount.is_finite():
        raise RequestValidationError(400, "invalid amount")
    return amount


def validate_request(method: str, body: str) -> ValidatedRequest:
    """
    Check method, body shape and business rules, in that order.

    Raises
    ------
    RequestValidationError
        405 for a method other than POST, 400 for a malformed body, an
        unparseable amount, a non-positive amount or an unknown type.
    """
    if method != ALLOWED_METHOD:
        raise RequestValidationError(405, "method not allowed")

    try:
        request = TransactionRequest.model_validate_json(body or "")
    except ValidationError as exc:
        raise RequestValidationError(400, "invalid JSON body") from exc

    amount = parse_amount(request.amount)

    try:
        kind = TransactionType(request.type)
    except ValueError:
        kind = None
    if amount <= 0 or kind is None:
        raise RequestValidationError(400, "invalid fields")

    return ValidatedRequest(amount=amount, kind=kind)


__all__ = [
    "ALLOWED_METHOD",
    "RequestValidationError",
    "ValidatedRequest",
    "parse_amount",
    "validate_request",
]
