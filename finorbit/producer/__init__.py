"""
Producer side of the pipeline: HTTP request in, SNS notification out.
"""

from finorbit.producer.validation import (
    RequestValidationError,
    ValidatedRequest,
    validate_request,
)

__all__ = [
    "RequestValidationError",
    "ValidatedRequest",
    "validate_request",
]
