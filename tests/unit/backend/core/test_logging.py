"""
Unit Tests for Centralized Logging.

Tests the logging configuration, structured fields, and source handling.
"""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import MagicMock, patch

import pytest

from daybook.backend.core import logging as logging_module
from daybook.backend.core.logging import (
    VALID_SOURCES,
    _resolve_log_path,
    get_logger,
    log_with_source,
    setup_logging,
)


@pytest.fixture
def mock_logging_config():
    return {
        "level": "INFO",
        "format": "json",
        "handlers": {
            "console": {"enabled": True},
            "file": {
                "enabled": False,
                "path": "logs/system.jsonl",
                "max_bytes": 10485760,
                "backup_count": 5,
            },
        },
    }


@pytest.fixture(autouse=True)
def _reset_logging_config():
    logging_module._logging_config = None
    yield
    logging_module._logging_config = None


class TestValidSources:

    def test_valid_sources(self):
        assert VALID_SOURCES == frozenset({"web", "cli", "api", "internal", "unknown"})


class TestLoggingConfigLoading:
    """Tests for logging configuration loading from YAML."""

    def test_reads_yaml_file(self, mock_logging_config):
        with patch("daybook.backend.core.logging.load_yaml_config", return_value=mock_logging_config):
            config = logging_module._load_logging_config()

        assert config["level"] == "INFO"
        assert config["handlers"]["file"]["backup_count"] == 5

    def test_raises_if_file_missing(self):
        with patch(
            "daybook.backend.core.logging.load_yaml_config",
            side_effect=FileNotFoundError("Configuration file not found: logging.yaml"),
        ):
            with pytest.raises(FileNotFoundError, match="logging.yaml"):
                logging_module._load_logging_config()

    def test_config_is_cached(self, mock_logging_config):
        with patch(
            "daybook.backend.core.logging.load_yaml_config",
            return_value=mock_logging_config,
        ) as mock_load:
            first = logging_module._load_logging_config()
            second = logging_module._load_logging_config()

        assert first is second
        mock_load.assert_called_once_with("logging.yaml")


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_uses_config_defaults(self, mock_logging_config):
        with patch("daybook.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging()

        root_logger = logging.getLogger()
        assert root_logger.level == logging.INFO
        assert any(isinstance(h, logging.StreamHandler) for h in root_logger.handlers)

    def test_override_takes_precedence(self, mock_logging_config):
        with patch("daybook.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(level="DEBUG", format_type="console")

        assert logging.getLogger().level == logging.DEBUG

    def test_console_can_be_disabled(self, mock_logging_config):
        with patch("daybook.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(enable_console=False)

        assert logging.getLogger().handlers == []

    def test_file_logging_adds_rotating_handler(self, tmp_path, mock_logging_config):
        log_file = tmp_path / "logs" / "system.jsonl"

        with patch("daybook.backend.core.logging._load_logging_config", return_value=mock_logging_config), \
             patch("daybook.backend.core.logging._resolve_log_path", return_value=log_file):
            setup_logging(enable_file_logging=True)

        root_logger = logging.getLogger()
        try:
            assert any(isinstance(h, RotatingFileHandler) for h in root_logger.handlers)
            assert log_file.parent.is_dir()
        finally:
            for handler in root_logger.handlers[:]:
                handler.close()
                root_logger.removeHandler(handler)

    def test_quiets_noisy_libraries(self, mock_logging_config):
        with patch("daybook.backend.core.logging._load_logging_config", return_value=mock_logging_config):
            setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


class TestGetLogger:

    def test_returns_structlog_logger(self):
        logger = get_logger("test.module")
        assert hasattr(logger, "bind")
        assert hasattr(logger, "info")


class TestLogWithSource:
    """Tests for log_with_source helper function."""

    def test_adds_source_field(self):
        logger = MagicMock()

        log_with_source(logger, "cli", "info", "Note created", note_id=12)

        logger.info.assert_called_once_with("Note created", source="cli", note_id=12)

    @pytest.mark.parametrize("level", ["debug", "info", "warning", "error", "critical", "WARNING"])
    def test_supports_levels(self, level):
        logger = MagicMock()

        log_with_source(logger, "web", level, "Test")

        getattr(logger, level.lower()).assert_called_once()

    def test_raises_on_invalid_level(self):
        """No fallback for unknown levels."""
        logger = get_logger("test")

        with pytest.raises(AttributeError):
            log_with_source(logger, "web", "nonexistent_level", "Test")


class TestResolveLogPath:

    def test_relative_to_project_root(self, tmp_path):
        with patch("daybook.backend.core.logging.find_project_root", return_value=tmp_path):
            assert _resolve_log_path("logs/system.jsonl") == tmp_path / "logs" / "system.jsonl"
