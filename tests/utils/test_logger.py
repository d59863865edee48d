"""
Tests for the component logger.

Tests cover:
- Logger creation by component and by explicit name
- Message formatting (component prefix, Rich markup)
- Colors read from the user config
- Root handler setup and level changes
"""

import logging

import pytest
from rich.logging import RichHandler

from dsctl.utils import config as config_module
from dsctl.utils.config import Settings
from dsctl.utils.logger import ComponentLogger, get_logger, reconfigure_logging, set_log_level


class TestComponentLoggerBasic:
    """Test basic ComponentLogger functionality."""

    def test_logger_creation(self):
        logger = get_logger("engine")
        assert isinstance(logger, ComponentLogger)
        assert logger.component_name == "engine"
        assert logger.base_logger.name == "dsctl.engine"

    def test_logger_creation_with_custom_params(self):
        """Test custom logger creation with explicit parameters."""
        logger = get_logger(name="custom_logger", color="blue")
        assert logger.component_name == "custom_logger"
        assert logger.color == "blue"

    def test_component_name_required(self):
        with pytest.raises(ValueError):
            get_logger()

    def test_basic_logging_methods(self):
        """All message types work without configuration."""
        logger = get_logger("test_component")

        logger.info("Info message")
        logger.debug("Debug message")
        logger.warning("Warning message")
        logger.error("Error message")
        logger.success("Success message")
        logger.key_info("Key info message")
        logger.timing("Timing message")

    def test_message_prefix_and_markup(self, caplog):
        logger = get_logger("batch", color="cyan")

        with caplog.at_level(logging.INFO, logger="dsctl.batch"):
            logger.info("window full")
            logger.success("done")

        assert caplog.records[0].message == "[cyan]Batch: window full[/cyan]"
        assert "✅ Batch: done" in caplog.records[1].message

    def test_color_from_config(self):
        config_module.set_settings(
            Settings(services_dir=".", logging={"colors": {"engine": "magenta"}})
        )

        assert get_logger("engine").color == "magenta"

    def test_default_color(self):
        assert get_logger("unconfigured").color == "white"

    def test_color_follows_settings_loaded_later(self):
        logger = get_logger("batch")
        assert logger.color == "white"

        config_module.set_settings(
            Settings(services_dir=".", logging={"colors": {"batch": "cyan"}})
        )

        assert logger.color == "cyan"


class TestRichSetup:
    def test_reconfigure_reads_level_from_settings(self):
        config_module.set_settings(Settings(services_dir=".", logging={"level": "info"}))

        reconfigure_logging()

        assert logging.getLogger().level == logging.INFO

    def test_single_rich_handler(self):
        get_logger("one")
        get_logger("two")

        handlers = [h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1

    def test_set_log_level(self):
        original = logging.getLogger().level
        try:
            set_log_level(logging.DEBUG)
            assert logging.getLogger().level == logging.DEBUG
            assert get_logger("engine").base_logger.isEnabledFor(logging.DEBUG)
        finally:
            logging.getLogger().setLevel(original)
