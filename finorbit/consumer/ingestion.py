"""
Ingestion loop: decode each delivered body and persist it.

Records are handled strictly in delivery order on the caller's thread.
Per-record problems (undecodable body, failed insert) are logged and the loop
moves on; the only error that escapes is `ProvisioningError`, which means the
worker has no usable database at all.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, Optional

import psycopg

from finorbit.consumer.decoder import Skip, decode_message
from finorbit.infrastructure.db_factory import ConnectionProvisioner, get_provisioner
from finorbit.infrastructure.schema import insert_transaction
from finorbit.utils.logging import get_logger

log = get_logger(__name__)

PROCESSED = "processed"


@dataclass
class BatchReport:
    """
    Outcome counters for one batch.

    `status` is always "processed": per-record failures are reported through
    logs and counters, never as a batch failure.
    """

    received: int = 0
    persisted: int = 0
    skipped: int = 0
    failed: int = 0
    aborted: bool = False
    status: str = PROCESSED

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def process_batch(
    bodies: Iterable[str],
    provisioner: Optional[ConnectionProvisioner] = None,
) -> BatchReport:
    """
    Persist every decodable body of a batch.

    Parameters
    ----------
    bodies : iterable[str]
        SQS message bodies in delivery order.
    provisioner : ConnectionProvisioner | None
        Source of the shared connection. Defaults to the process-wide one.

    Returns
    -------
    BatchReport
        Counters for the batch. An offline provisioner (no connection) stops
        the batch at the first decodable record with `aborted=True`.

    Raises
    ------
    ProvisioningError
        If the shared connection could not be initialized.
    """
    provisioner = provisioner or get_provisioner()
    report = BatchReport()

    for index, body in enumerate(bodies):
        report.received += 1
        result = decode_message(body)
        if isinstance(result, Skip):
            report.skipped += 1
            log.warning(
                f"Skipping message: {result.reason}",
                extra={"record_index": index, "reason": result.reason},
            )
            continue

        conn = provisioner.acquire()
        if conn is None:
            report.aborted = True
            log.warning(
                "Database not initialized, aborting batch",
                extra={"record_index": index},
            )
            break

        try:
            insert_transaction(conn, result)
        except psycopg.Error as exc:
            report.failed += 1
            log.error(
                f"Failed to save transaction: {exc}",
                extra={"record_index": index, "user_id": result.user_id},
            )
            continue

        report.persisted += 1
        log.info(
            f"Transaction saved | user={result.user_id} | type={result.type} | amount={result.amount}",
            extra={
                "record_index": index,
                "user_id": result.user_id,
                "type": result.type,
                "amount": str(result.amount),
            },
        )

    log.info(
        "Batch processed",
        extra={
            "received": report.received,
            "persisted": report.persisted,
            "skipped": report.skipped,
            "failed": report.failed,
            "aborted": report.aborted,
        },
    )
    return report


__all__ = ["BatchReport", "PROCESSED", "process_batch"]
