"""
AWS Lambda entry point for the consumer (SQS event source, SNS fan-out).

The handler always reports success for the batch; individual failures are
visible in the logs only. A `ProvisioningError` terminates the process so
the runtime replaces the container.
"""

from __future__ import annotations

import sys
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional

from finorbit.config import get_settings
from finorbit.consumer.ingestion import process_batch
from finorbit.infrastructure.db_factory import ConnectionProvisioner
from finorbit.infrastructure.schema import ProvisioningError
from finorbit.utils.logging import configure_logging, get_logger

log = get_logger(__name__)


@lru_cache(maxsize=1)
def _bootstrap() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def extract_bodies(event: Mapping[str, Any]) -> List[str]:
    """Pull the message bodies out of an SQS event, in delivery order."""
    bodies = []
    for record in event.get("Records") or []:
        body = record.get("body") if isinstance(record, Mapping) else None
        bodies.append(body if isinstance(body, str) else "")
    return bodies


def lambda_handler(
    event: Mapping[str, Any],
    context: Any = None,
    provisioner: Optional[ConnectionProvisioner] = None,
) -> Dict[str, Any]:
    """Entry point for AWS Lambda."""
    _bootstrap()
    bodies = extract_bodies(event)
    log.info("Processing messages", extra={"records": len(bodies)})

    try:
        report = process_batch(bodies, provisioner=provisioner)
    except ProvisioningError as exc:
        log.critical(f"Database unavailable, terminating worker: {exc}")
        sys.exit(1)

    return report.as_dict()


__all__ = ["extract_bodies", "lambda_handler"]
