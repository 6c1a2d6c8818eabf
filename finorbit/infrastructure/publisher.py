"""
SNS publishing for the FinOrbit producer.

`SnsPublisher` wraps a boto3 SNS client created on first use. In offline mode
`get_publisher()` hands out an `OfflinePublisher` that only logs, so the
producer can run without AWS credentials or network access.
"""

from __future__ import annotations

import threading
import uuid
from typing import Any, Optional, Protocol, runtime_checkable

import boto3

from finorbit.config import Settings, get_settings
from finorbit.utils.logging import get_logger

log = get_logger(__name__)


@runtime_checkable
class Publisher(Protocol):
    """Anything able to publish a text message to a topic and return its id."""

    def publish(self, topic_arn: str, message: str) -> str:
        ...


class SnsPublisher:
    """
    Publish messages through the AWS SNS API.

    Raises `botocore.exceptions.BotoCoreError` or `ClientError` on failure.
    """

    def __init__(self, client: Any = None, region_name: Optional[str] = None) -> None:
        self._client = client
        self._region_name = region_name
        self._lock = threading.Lock()

    @property
    def client(self) -> Any:
        with self._lock:
            if self._client is None:
                self._client = boto3.client("sns", region_name=self._region_name)
            return self._client

    def publish(self, topic_arn: str, message: str) -> str:
        response = self.client.publish(TopicArn=topic_arn, Message=message)
        return response["MessageId"]


class OfflinePublisher:
    """Stand-in used when APP_ENV=test: logs the message instead of sending it."""

    def publish(self, topic_arn: str, message: str) -> str:
        message_id = f"offline-{uuid.uuid4()}"
        log.info(
            "Offline mode enabled, message not sent",
            extra={"topic_arn": topic_arn, "message_id": message_id},
        )
        return message_id


_publisher: Optional[Publisher] = None
_publisher_lock = threading.Lock()


def build_publisher(settings: Optional[Settings] = None) -> Publisher:
    settings = settings or get_settings()
    if settings.offline_mode:
        return OfflinePublisher()
    return SnsPublisher(region_name=settings.aws_region)


def get_publisher() -> Publisher:
    """
    Retrieve the process-wide publisher, creating it on first use.
    """
    global _publisher
    with _publisher_lock:
        if _publisher is None:
            _publisher = build_publisher()
        return _publisher


def set_publisher(publisher: Optional[Publisher]) -> None:
    """Replace (or with None, forget) the process-wide publisher."""
    global _publisher
    with _publisher_lock:
        _publisher = publisher


__all__ = [
    "OfflinePublisher",
    "Publisher",
    "SnsPublisher",
    "build_publisher",
    "get_publisher",
    "set_publisher",
]
