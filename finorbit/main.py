from __future__ import annotations

import json
import sys
from pathlib import Path

import typer

from finorbit.config import get_settings
from finorbit.consumer import handler as consumer_handler
from finorbit.infrastructure.db_factory import get_provisioner
from finorbit.infrastructure.schema import ProvisioningError
from finorbit.producer import handler as producer_handler
from finorbit.utils.logging import configure_logging

app = typer.Typer(help="FinOrbit transaction pipeline CLI.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} "
        f"(sslmode={settings.db_sslmode}) | "
        f"topic={settings.sns_topic_arn or '<unset>'} | "
        f"env={settings.app_env} offline={settings.offline_mode}"
    )


@app.command()
def provision() -> None:
    """
    Connect to the database and create the transactions table if missing.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        conn = get_provisioner().acquire()
    except ProvisioningError as exc:
        typer.echo(f"Provisioning failed: {exc}", err=True)
        raise typer.Exit(code=1)
    if conn is None:
        typer.echo("Offline mode: no database connection opened.")
        return
    typer.echo("Database ready.")


@app.command()
def consume(
    event_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="JSON file holding an SQS event ({'Records': [{'body': ...}, ...]}).",
    ),
) -> None:
    """
    Run the consumer handler on a recorded SQS event.
    """
    event = json.loads(event_file.read_text(encoding="utf-8"))
    report = consumer_handler.lambda_handler(event, None)
    typer.echo(json.dumps(report, indent=2))


@app.command()
def produce(
    amount: str = typer.Option(..., "--amount", "-a", help="Transaction amount, e.g. 150.25."),
    kind: str = typer.Option(..., "--type", "-t", help="deposit or withdraw."),
    method: str = typer.Option("POST", "--method", help="HTTP method to simulate."),
) -> None:
    """
    Run the producer handler on a synthetic API Gateway request.
    """
    event = {
        "requestContext": {"http": {"method": method}},
        "body": json.dumps({"amount": amount, "type": kind}),
        "isBase64Encoded": False,
    }
    response = producer_handler.lambda_handler(event, None)
    typer.echo(json.dumps(response, indent=2))
    if response["statusCode"] >= 400:
        raise typer.Exit(code=1)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
