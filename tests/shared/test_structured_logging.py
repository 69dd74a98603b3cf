"""Tests for structured logging system."""

from __future__ import annotations

import json
import logging

from rich.logging import RichHandler

from promptvault.shared.errors import ErrorCode, ErrorContext, StorageUnavailableError
from promptvault.shared.logging import (
    StructuredFormatter,
    log_api_call,
    log_operation_error,
    log_operation_success,
    setup_structured_logger,
)


def _record(level: int = logging.INFO, msg: str = "Test message") -> logging.LogRecord:
    return logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestStructuredFormatter:
    """Test StructuredFormatter JSON output."""

    def test_format_basic_log(self):
        log_data = json.loads(StructuredFormatter().format(_record()))

        assert log_data["level"] == "INFO"
        assert log_data["logger"] == "test_logger"
        assert log_data["message"] == "Test message"
        assert "timestamp" in log_data

    def test_format_log_with_context(self):
        record = _record(logging.WARNING, "Store failed")
        record.error_code = "STORAGE_UNAVAILABLE"
        record.context = {"key": "promptvault:v1:items"}
        record.operation = "cache_put"

        log_data = json.loads(StructuredFormatter().format(record))

        assert log_data["error_code"] == "STORAGE_UNAVAILABLE"
        assert log_data["context"] == {"key": "promptvault:v1:items"}
        assert log_data["operation"] == "cache_put"


class TestSetupStructuredLogger:
    """Test logger setup."""

    def test_rich_console_handler(self):
        logger = setup_structured_logger(level="DEBUG")

        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0], RichHandler)
        assert logger.propagate is False

    def test_file_handler_writes_json(self, tmp_path):
        log_file = tmp_path / "promptvault.log"
        logger = setup_structured_logger(level="INFO", log_file=str(log_file), use_rich_console=False)

        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["message"] == "hello"

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_structured_logger(use_rich_console=False)
        logger = setup_structured_logger(use_rich_console=False)

        assert len(logger.handlers) == 1


class TestLogHelpers:
    """Test the log_operation_* helpers."""

    def test_error_logged_at_requested_level(self, caplog):
        logger = logging.getLogger("promptvault.test")
        error = StorageUnavailableError(
            ErrorCode.STORAGE_UNAVAILABLE,
            "disabled",
            ErrorContext(operation="cache_put", additional_data={"key": "items"}),
            original_error=OSError("denied"),
        )

        with caplog.at_level(logging.DEBUG, logger="promptvault"):
            log_operation_error(logger, error, level=logging.WARNING)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.error_code == "STORAGE_UNAVAILABLE"
        assert record.operation == "cache_put"
        assert record.context["additional_data"] == {"key": "items"}
        assert record.exc_info is None

    def test_error_at_error_level_keeps_traceback(self, caplog):
        logger = logging.getLogger("promptvault.test")
        try:
            raise OSError("denied")
        except OSError as cause:
            error = StorageUnavailableError(ErrorCode.STORAGE_UNAVAILABLE, "disabled", original_error=cause)

        with caplog.at_level(logging.DEBUG, logger="promptvault"):
            log_operation_error(logger, error, operation="cache_get")

        assert caplog.records[-1].exc_info is not None

    def test_success_logged_at_debug(self, caplog):
        logger = logging.getLogger("promptvault.test")

        with caplog.at_level(logging.DEBUG, logger="promptvault"):
            log_operation_success(logger, "get_items", 12.5, result_info={"key": "items"})

        record = caplog.records[-1]
        assert record.levelno == logging.DEBUG
        assert record.duration_ms == 12.5

    def test_failed_api_call_is_warning(self, caplog):
        logger = logging.getLogger("promptvault.test")

        with caplog.at_level(logging.DEBUG, logger="promptvault"):
            log_api_call(logger, "prompts", status_code=503)
            log_api_call(logger, "prompts", status_code=200)

        assert [r.levelno for r in caplog.records[-2:]] == [logging.WARNING, logging.DEBUG]
        assert "failed with status 503" in caplog.records[-2].getMessage()
