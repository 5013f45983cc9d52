# tests/common/test_logger.py
"""
Unit tests for courier_tracker/common/logger.py.
"""

import json
import logging
import sys
from unittest.mock import MagicMock, Mock, patch

import pytest

from courier_tracker.common.constants import TypeMsg
from courier_tracker.common.logger import (
    DEFAULT_LOGGER_NAME,
    ColoredFormatter,
    JsonFormatter,
    _get_caller_info,
    _loggers,
    get_logger,
    log_debug,
    log_error,
    log_info,
    log_warning,
    setup_logging,
)


def make_record(level: int = logging.INFO, msg: str = "Test message", exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.module = "test_module"
    record.funcName = "test_function"
    return record


class TestJsonFormatter:
    """JsonFormatter output."""

    def test_format_basic_record(self) -> None:
        data = json.loads(JsonFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["message"] == "Test message"
        assert data["module"] == "test_module"
        assert data["function"] == "test_function"
        assert data["line"] == 10

    def test_format_with_extra_data(self) -> None:
        record = make_record(logging.WARNING)
        record.extra_data = {"courier_id": "C1", "connection_id": "abc"}

        data = json.loads(JsonFormatter().format(record))

        assert data["extra"] == {"courier_id": "C1", "connection_id": "abc"}

    def test_format_with_exception(self) -> None:
        try:
            raise ValueError("Test exception")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(make_record(logging.ERROR, exc_info=exc_info)))

        assert "ValueError: Test exception" in data["exception"]


class TestColoredFormatter:
    """ColoredFormatter output."""

    def test_format_basic_record(self) -> None:
        result = ColoredFormatter().format(make_record())

        assert "INFO" in result
        assert "Test message" in result
        assert "\033[" in result

    def test_format_with_caller_info(self) -> None:
        record = make_record(logging.DEBUG)
        record.extra_data = {
            "caller_function": "handle_location_update",
            "caller_module": "courier_tracker.core.tracking.coordinator",
            "caller_file": "coordinator.py",
            "caller_line": 42,
        }

        result = ColoredFormatter().format(record)

        assert "courier_tracker.core.tracking.coordinator.handle_location_update()" in result
        assert "coordinator.py:42" in result


class TestGetLogger:
    """get_logger caching and configuration."""

    def setup_method(self) -> None:
        _loggers.clear()
        for name in ("test_logger", "test_with_settings", "test_no_settings"):
            logging.getLogger(name).handlers.clear()

    def test_creates_logger_with_console_handler(self) -> None:
        logger = get_logger("test_logger")

        assert logger.name == "test_logger"
        assert len(logger.handlers) >= 1
        assert logger.propagate is False

    def test_returns_cached_logger(self) -> None:
        assert get_logger("test_logger") is get_logger("test_logger")

    def test_no_duplicate_handlers(self) -> None:
        logger = get_logger("test_logger")
        handlers = len(logger.handlers)
        _loggers.clear()

        assert len(get_logger("test_logger").handlers) == handlers

    @patch("courier_tracker.config.settings")
    def test_uses_settings(self, mock_settings: Mock) -> None:
        mock_settings.logging.LOG_LEVEL = "WARNING"
        mock_settings.logging.LOG_FORMAT = "json"
        mock_settings.logging.LOG_TO_FILE = False
        mock_settings.logging.LOG_FILE_PATH = "logs/test.log"
        mock_settings.logging.LOG_MAX_BYTES = 10485760

        logger = get_logger("test_with_settings")

        assert logger.level == logging.WARNING
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)

    def test_handles_missing_settings(self) -> None:
        with patch.dict("sys.modules", {"courier_tracker.config": None}):
            logger = get_logger("test_no_settings")

        assert logger.level == logging.DEBUG


class TestSetupLogging:
    """setup_logging()."""

    def test_quiets_third_party_loggers(self) -> None:
        setup_logging()

        assert logging.getLogger("asyncpg").level == logging.WARNING
        assert logging.getLogger("uvicorn.access").level == logging.WARNING


class TestGetCallerInfo:
    """_get_caller_info()."""

    def test_reports_calling_function(self) -> None:
        def helper():
            return _get_caller_info()

        def caller():
            return helper()

        info = caller()

        assert info["caller_function"] == "caller"
        assert info["caller_file"] == "test_logger.py"


class TestLogFunctions:
    """Async logging helpers."""

    def setup_method(self) -> None:
        _loggers.clear()

    @pytest.mark.asyncio
    async def test_log_info_basic(self) -> None:
        with patch.object(logging.Logger, "info") as mock_info:
            await log_info("Test message")

            mock_info.assert_called_once()
            assert mock_info.call_args[0][0] == "Test message"

    @pytest.mark.asyncio
    async def test_log_info_levels(self) -> None:
        with patch.object(logging.Logger, "debug") as mock_debug:
            await log_info("Debug message", type_msg=TypeMsg.DEBUG)
            mock_debug.assert_called_once()

        with patch.object(logging.Logger, "warning") as mock_warning:
            await log_info("Warning message", type_msg=TypeMsg.WARNING)
            mock_warning.assert_called_once()

        with patch.object(logging.Logger, "critical") as mock_critical:
            await log_info("Critical message", type_msg=TypeMsg.CRITICAL)
            mock_critical.assert_called_once()

    @pytest.mark.asyncio
    async def test_log_info_carries_extra(self) -> None:
        with patch.object(logging.Logger, "info") as mock_info:
            await log_info("Test message", extra={"courier_id": "C1"})

            extra_data = mock_info.call_args[1]["extra"]["extra_data"]
            assert extra_data["courier_id"] == "C1"
            assert "caller_function" in extra_data

    @pytest.mark.asyncio
    async def test_log_debug(self) -> None:
        with patch.object(logging.Logger, "debug") as mock_debug:
            await log_debug("Debug message")
            mock_debug.assert_called_once()

    @pytest.mark.asyncio
    async def test_log_warning(self) -> None:
        with patch.object(logging.Logger, "warning") as mock_warning:
            await log_warning("Warning message")
            mock_warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_log_error_with_exc_info(self) -> None:
        with patch.object(logging.Logger, "error") as mock_error:
            await log_error("Error message", exc_info=True)

            mock_error.assert_called_once()
            assert mock_error.call_args[1].get("exc_info") is True

    @pytest.mark.asyncio
    async def test_custom_logger_name(self) -> None:
        with patch("courier_tracker.common.logger.get_logger") as mock_get_logger:
            mock_logger = MagicMock()
            mock_get_logger.return_value = mock_logger

            await log_info("Test message", logger_name="tracking")

            mock_get_logger.assert_called_once_with("tracking")
            mock_logger.info.assert_called_once()

    @pytest.mark.asyncio
    async def test_default_logger_name(self) -> None:
        with patch("courier_tracker.common.logger.get_logger") as mock_get_logger:
            mock_get_logger.return_value = MagicMock()

            await log_warning("Test message")

            mock_get_logger.assert_called_once_with(DEFAULT_LOGGER_NAME)
