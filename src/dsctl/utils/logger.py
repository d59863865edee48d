"""
Component Logger Framework

Provides colored logging for dsctl components with:
- One API for every component (engine, batch, live view, CLI)
- Rich terminal output with component-specific colors
- Graceful fallbacks when configuration is unavailable

Usage:
    logger = get_logger("batch")
    logger.key_info("Dispatching 5 services")
    logger.info("Window full, waiting for 4 units")
    logger.debug("Detailed trace")
    logger.success("Operation completed")
    logger.warning("Something to note")
    logger.error("Something went wrong")
    logger.timing("Batch took 2.5 seconds")

    # Custom loggers with explicit parameters
    logger = get_logger(name="custom_component", color="blue")
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from dsctl.utils.config import get_config_value

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class ComponentLogger:
    """
    Rich-formatted logger for dsctl components with color coding and message hierarchy.

    Message Types:
    - key_info: Important operational information
    - info: Normal operational messages
    - debug: Detailed tracing information
    - warning: Warning messages
    - error: Error messages
    - success: Success messages
    - timing: Timing information
    """

    def __init__(
        self, base_logger: logging.Logger, component_name: str, color: str | None = None
    ):
        """
        Initialize component logger.

        Args:
            base_logger: Underlying Python logger
            component_name: Name of the component (e.g., 'engine', 'batch')
            color: Rich color name for this component; when omitted it is read
                from ``logging.colors.<component_name>`` at each log call
        """
        self.base_logger = base_logger
        self.component_name = component_name
        self._color = color

    @property
    def color(self) -> str:
        if self._color is not None:
            return self._color
        return get_config_value(f"logging.colors.{self.component_name}") or "white"

    def _format_message(self, message: str, style: str, emoji: str = "") -> str:
        """Format message with Rich markup and emoji prefix."""
        prefix = f"{emoji}{self.component_name.title()}: "
        if style:
            return f"[{style}]{prefix}{message}[/{style}]"
        return f"{prefix}{message}"

    def key_info(self, message: str) -> None:
        """Important operational information."""
        style = f"bold {self.color}" if self.color != "white" else "bold white"
        self.base_logger.info(self._format_message(message, style, ""))

    def info(self, message: str) -> None:
        self.base_logger.info(self._format_message(message, self.color, ""))

    def debug(self, message: str) -> None:
        style = f"dim {self.color}" if self.color != "white" else "dim white"
        self.base_logger.debug(self._format_message(message, style, "🔍 "))

    def warning(self, message: str) -> None:
        self.base_logger.warning(self._format_message(message, "bold yellow", "⚠️  "))

    def error(self, message: str, exc_info: bool = False) -> None:
        self.base_logger.error(self._format_message(message, "bold red", "❌ "), exc_info=exc_info)

    def success(self, message: str) -> None:
        self.base_logger.info(self._format_message(message, "bold green", "✅ "))

    def timing(self, message: str) -> None:
        self.base_logger.info(self._format_message(message, "bold white", "🕒 "))


def _setup_rich_logging(level: int | None = None) -> None:
    """Configure Rich logging for the root logger (called once)."""
    root_logger = logging.getLogger()

    # Prevent duplicate handler registration
    for handler in root_logger.handlers:
        if isinstance(handler, RichHandler):
            return

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    root_logger.setLevel(configured_level() if level is None else level)

    show_full_paths = bool(get_config_value("logging.show_full_paths", False))

    # Log to stderr so reports on stdout stay clean for scripting
    console = Console(stderr=True)

    handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        markup=True,
        show_path=show_full_paths,
        show_time=True,
        show_level=True,
        tracebacks_show_locals=False,
    )

    root_logger.addHandler(handler)


def configured_level() -> int:
    """Root level from ``logging.level`` in the current settings."""
    configured = str(get_config_value("logging.level", "warning")).lower()
    return LEVELS.get(configured, logging.WARNING)


def set_log_level(level: int) -> None:
    """Change the root log level (used by --verbose/--quiet)."""
    _setup_rich_logging(level)
    logging.getLogger().setLevel(level)


def reconfigure_logging() -> None:
    """Re-read ``logging.level`` after the process-wide settings changed.

    Command modules create their loggers at import time, before the CLI has
    loaded a ``--config`` file, so the first setup may have used other settings.
    """
    set_log_level(configured_level())


def get_logger(
    component_name: str | None = None,
    *,
    name: str | None = None,
    color: str | None = None,
) -> ComponentLogger:
    """
    Get a component logger.

    Args:
        component_name: Component name (e.g., 'engine', 'batch'); its color is
            read from ``logging.colors.<component_name>`` in the user config
        name: Direct logger name for custom loggers (keyword-only)
        color: Direct color specification (keyword-only)

    Returns:
        ComponentLogger instance

    Examples:
        logger = get_logger("batch")
        logger = get_logger(name="test_logger", color="blue")
    """
    _setup_rich_logging()

    if name is not None:
        return ComponentLogger(logging.getLogger(name), name, color or "white")

    if component_name is None:
        raise ValueError(
            "Component name is required. Usage: get_logger('component_name') or "
            "get_logger(name='custom_name', color='blue')"
        )

    return ComponentLogger(logging.getLogger(f"dsctl.{component_name}"), component_name, color)
