from __future__ import annotations

import json
import logging

import pytest

from finorbit.utils.logging import JsonFormatter, _json_formatter, configure_logging

RECORD_INDEX = 3


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.record_index = RECORD_INDEX
    record.user_id = "user-123"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["record_index"] == RECORD_INDEX
    assert payload["user_id"] == "user-123"
    assert "pathname" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"reason": "invalid transaction payload"}

    payload = json.loads(_json_formatter(record))

    assert payload["reason"] == "invalid transaction payload"


def test_json_formatter_renders_non_json_values_as_text() -> None:
    from decimal import Decimal

    record = _record()
    record.amount = Decimal("100.00")

    payload = json.loads(_json_formatter(record))

    assert payload["amount"] == "100.00"


def test_configure_logging_installs_json_formatter(restore_root_logger) -> None:
    configure_logging(level="debug", json_logs=True)

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
