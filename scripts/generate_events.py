"""
Sample event generator for the FinOrbit consumer.

Implements deterministic pseudo-random transaction generation, wraps each one
the way SNS delivers it to SQS, and writes the resulting SQS event as JSON so
it can be replayed with `finorbit consume`.
"""

from __future__ import annotations

import json
import random
import sys
import time
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import typer

from finorbit.domain.models import TIMESTAMP_FORMAT, TransactionType

app = typer.Typer(help="Generate SQS events carrying SNS-wrapped transactions.")

TOPIC_ARN = "arn:aws:sns:us-east-1:000000000000:finorbit-transactions"
MALFORMED_BODY = "not json"


def _generate_transactions(count: int, seed: int) -> list[dict[str, str]]:
    rng = random.Random(seed)
    kinds = [kind.value for kind in TransactionType]
    start = datetime(2025, 1, 1, tzinfo=timezone.utc)

    transactions = []
    for _ in range(count):
        cents = rng.randint(1, 1_000_000)
        created = start + timedelta(seconds=rng.randint(0, 365 * 24 * 3600))
        transactions.append(
            {
                "user_id": str(uuid.UUID(int=rng.getrandbits(128), version=4)),
                "amount": f"{cents // 100}.{cents % 100:02d}",
                "type": rng.choice(kinds),
                "timestamp": created.strftime(TIMESTAMP_FORMAT),
            }
        )
    return transactions


def _wrap_sns(transaction: dict[str, str], message_id: str) -> str:
    envelope = {
        "Type": "Notification",
        "MessageId": message_id,
        "TopicArn": TOPIC_ARN,
        "Message": json.dumps(transaction),
        "Timestamp": transaction["timestamp"],
    }
    return json.dumps(envelope)


def _build_sqs_event(
    transactions: list[dict[str, str]], malformed_every: int = 0
) -> dict[str, Any]:
    records = []
    for index, transaction in enumerate(transactions, start=1):
        message_id = f"msg-{index:06d}"
        if malformed_every and index % malformed_every == 0:
            body = MALFORMED_BODY
        else:
            body = _wrap_sns(transaction, message_id)
        records.append(
            {
                "messageId": message_id,
                "eventSource": "aws:sqs",
                "body": body,
            }
        )
    return {"Records": records}


def _write_event(path: Path, event: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(event, f, indent=2)


@app.command()
def main(
    count: int = typer.Option(
        10,
        "--count",
        "-n",
        help="Number of transactions to generate.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    malformed_every: int = typer.Option(
        0,
        "--malformed-every",
        help="Replace every Nth body with an undecodable one (0 disables).",
    ),
    output: Path = typer.Option(
        Path("events/sqs-event.json"),
        "--output",
        "-o",
        help="Where to write the SQS event JSON.",
    ),
) -> None:
    """
    Generate a replayable SQS event file.
    """
    start = time.perf_counter()
    transactions = _generate_transactions(count, seed)
    event = _build_sqs_event(transactions, malformed_every=malformed_every)
    _write_event(output, event)
    duration = time.perf_counter() - start
    typer.echo(f"Wrote {count:,} records -> {output} in {duration:.2f}s (seed={seed})")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
