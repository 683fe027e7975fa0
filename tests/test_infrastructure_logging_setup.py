"""
Tests for logging setup and configuration utilities.
"""

import logging
import sys
from pathlib import Path
from unittest.mock import Mock, patch

from device_upstream.infrastructure.config.models import LoggingConfig
from device_upstream.infrastructure.logging.setup import InterceptHandler, setup_logging


class TestSetupLogging:
    """Test cases for setup_logging."""

    def teardown_method(self) -> None:
        logging.basicConfig(handlers=[logging.NullHandler()], force=True)

    @patch('device_upstream.infrastructure.logging.setup.loguru_logger')
    def test_console_only(self, mock_loguru: Mock) -> None:
        setup_logging(LoggingConfig(level="debug"))

        mock_loguru.remove.assert_called_once()
        mock_loguru.add.assert_called_once()
        args, kwargs = mock_loguru.add.call_args
        assert args[0] == sys.stderr
        assert kwargs["level"] == "DEBUG"

    @patch('device_upstream.infrastructure.logging.setup.loguru_logger')
    def test_console_and_file(self, mock_loguru: Mock, tmp_path: Path) -> None:
        log_dir = tmp_path / "logs"
        config = LoggingConfig(file_enabled=True, log_directory=str(log_dir),
                               max_file_size="1 MB", backup_count=3)

        setup_logging(config)

        assert log_dir.is_dir()
        assert mock_loguru.add.call_count == 2
        args, kwargs = mock_loguru.add.call_args
        assert args[0] == log_dir / "upstream.log"
        assert kwargs["rotation"] == "1 MB"
        assert kwargs["retention"] == 3

    @patch('device_upstream.infrastructure.logging.setup.loguru_logger')
    def test_standard_logging_is_intercepted(self, mock_loguru: Mock) -> None:
        setup_logging(LoggingConfig(console_enabled=False))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], InterceptHandler)
        mock_loguru.add.assert_not_called()


class TestInterceptHandler:
    """Test cases for InterceptHandler."""

    @patch('device_upstream.infrastructure.logging.setup.loguru_logger')
    def test_emit_forwards_to_loguru(self, mock_loguru: Mock) -> None:
        mock_loguru.level.return_value = Mock(name="level")
        mock_loguru.level.return_value.name = "WARNING"
        record = logging.LogRecord("device_upstream.test", logging.WARNING, __file__, 10,
                                   "queue %s full", ("side-effects",), None)

        InterceptHandler().emit(record)

        mock_loguru.level.assert_called_once_with("WARNING")
        mock_loguru.opt.return_value.log.assert_called_once_with("WARNING", "queue side-effects full")

    @patch('device_upstream.infrastructure.logging.setup.loguru_logger')
    def test_unknown_level_falls_back_to_number(self, mock_loguru: Mock) -> None:
        mock_loguru.level.side_effect = ValueError("unknown level")
        record = logging.LogRecord("device_upstream.test", 25, __file__, 10, "custom", None, None)
        record.levelname = "CUSTOM"

        InterceptHandler().emit(record)

        mock_loguru.opt.return_value.log.assert_called_once_with(25, "custom")
