"""
AWS Lambda entry point for the producer (API Gateway HTTP API, payload v2).

Validates the request, stamps it with a user id and a UTC timestamp and
publishes the resulting event to the configured SNS topic.
"""

from __future__ import annotations

import base64
import binascii
import json
import uuid
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from botocore.exceptions import BotoCoreError, ClientError

from finorbit.config import Settings, get_settings
from finorbit.domain.models import TransactionEvent
from finorbit.infrastructure.publisher import Publisher, get_publisher
from finorbit.producer.validation import RequestValidationError, validate_request
from finorbit.utils.logging import configure_logging, get_logger

log = get_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


@lru_cache(maxsize=1)
def _bootstrap() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _response(status_code: int, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": dict(JSON_HEADERS),
        "body": json.dumps(payload),
    }


def _error(status_code: int, reason: str) -> Dict[str, Any]:
    return _response(status_code, {"error": reason})


def request_method(event: Mapping[str, Any]) -> str:
    http = (event.get("requestContext") or {}).get("http") or {}
    return http.get("method") or ""


def request_body(event: Mapping[str, Any]) -> str:
    """Return the raw body, base64-decoded when API Gateway flagged it."""
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise RequestValidationError(400, "invalid JSON body") from exc
    return body


def lambda_handler(
    event: Mapping[str, Any],
    context: Any = None,
    publisher: Optional[Publisher] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Any]:
    """Entry point for AWS Lambda."""
    _bootstrap()
    settings = settings or get_settings()
    log.info("Producer invoked")

    method = request_method(event)
    try:
        validated = validate_request(method, request_body(event))
    except RequestValidationError as exc:
        log.warning(
            f"Request rejected: {exc.reason}",
            extra={"status_code": exc.status_code, "method": method},
        )
        return _error(exc.status_code, exc.reason)

    tx_event = TransactionEvent.create(
        user_id=str(uuid.uuid4()), amount=validated.amount, kind=validated.kind
    )

    topic_arn = settings.sns_topic_arn
    if not topic_arn:
        log.error("SNS_TOPIC_ARN is not configured")
        return _error(500, "SNS_TOPIC_ARN is not configured")

    message = tx_event.model_dump_json()
    publisher = publisher or get_publisher()
    try:
        message_id = publisher.publish(topic_arn, message)
    except (BotoCoreError, ClientError) as exc:
        log.error(f"Failed to publish to SNS: {exc}", extra={"topic_arn": topic_arn})
        return _error(500, "failed to publish message")

    log.info(
        f"Event published to SNS: {message}",
        extra={"message_id": message_id, "user_id": tx_event.user_id},
    )
    return _response(
        200,
        {
            "message": f"transaction submitted for processing: {tx_event.type}",
            "message_id": message_id,
            "type": tx_event.type,
        },
    )


__all__ = ["lambda_handler", "request_body", "request_method"]
