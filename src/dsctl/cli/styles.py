"""Centralized color and style management for the dsctl CLI.

Semantic style names (success, error, warning) are defined once in a Rich
theme and referenced everywhere as markup, e.g. ``[success]...[/success]``.
Questionary prompts get a matching style.
"""

import sys
from dataclasses import dataclass

from questionary import Style as QuestionaryStyle
from rich.console import Console
from rich.theme import Theme

from dsctl.utils.config import get_config_value
from dsctl.utils.logger import get_logger

logger = get_logger("styles")


# ============================================================================
# THEME CONFIGURATION
# ============================================================================


@dataclass
class ColorTheme:
    """Colors for the CLI.

    Error, warning and success follow terminal conventions; primary, accent
    and info give the tool its identity and can be overridden from the
    ``cli.theme`` mapping in the user config.
    """

    error: str = "#ff5f5f"
    warning: str = "#ffaa00"
    success: str = "#5fd787"

    primary: str = "#5f87d7"
    accent: str = "#87d7ff"
    command: str = "#d7af5f"
    path: str = "#a2ae9d"
    info: str = "#87afd7"

    text_secondary: str = "#888888"
    text_dim: str = "#666666"
    border_default: str = "#555555"


DEFAULT_THEME = ColorTheme()


def load_theme_from_config() -> ColorTheme:
    """Build the theme, applying valid hex overrides from ``cli.theme``."""
    overrides = get_config_value("cli.theme", {}) or {}
    if not isinstance(overrides, dict):
        logger.warning("'cli.theme' must be a mapping of color names, using default theme")
        return DEFAULT_THEME

    valid = {}
    for key, value in overrides.items():
        if key not in ColorTheme.__dataclass_fields__:
            logger.warning(f"Unknown theme color '{key}', ignoring")
        elif not isinstance(value, str) or not value.startswith("#"):
            logger.warning(f"Invalid color format for {key}: {value}, ignoring")
        else:
            valid[key] = value
    return ColorTheme(**valid) if valid else DEFAULT_THEME


def _build_rich_theme(theme: ColorTheme) -> Theme:
    return Theme(
        {
            # Status styles
            "success": f"bold {theme.success}",
            "error": f"bold {theme.error}",
            "warning": f"bold {theme.warning}",
            "info": f"bold {theme.info}",
            # Text styles
            "primary": f"bold {theme.primary}",
            "secondary": theme.text_secondary,
            "dim": theme.text_dim,
            "bold_primary": f"bold {theme.primary}",
            # Component-specific styles
            "header": f"bold {theme.primary}",
            "label": "bold",
            "value": theme.success,
            "path": theme.path,
            "command": theme.command,
            "accent": theme.accent,
            "border": theme.border_default,
        }
    )


def _build_questionary_style(theme: ColorTheme) -> QuestionaryStyle:
    return QuestionaryStyle(
        [
            ("qmark", f"fg:{theme.accent} bold"),
            ("question", "bold"),
            ("answer", f"fg:{theme.primary} bold"),
            ("instruction", f"fg:{theme.text_dim} italic"),
        ]
    )


def make_console(theme: ColorTheme | None = None, **kwargs) -> Console:
    """Create a Console carrying the dsctl theme (tests pass ``file=``)."""
    rich_theme = _build_rich_theme(theme or _active_theme)
    if sys.platform == "win32":
        kwargs.setdefault("legacy_windows", False)
    return Console(theme=rich_theme, **kwargs)


_active_theme = DEFAULT_THEME

# Singleton console instance with theme
console = make_console()
custom_style = _build_questionary_style(_active_theme)


def set_theme(theme: ColorTheme) -> None:
    """Activate a theme and rebuild the console and prompt style."""
    global _active_theme, console, custom_style
    _active_theme = theme
    console = make_console(theme)
    custom_style = _build_questionary_style(theme)


def initialize_theme_from_config() -> None:
    """Apply the configured theme; falls back to the default on any error."""
    try:
        set_theme(load_theme_from_config())
    except (ValueError, TypeError) as e:
        logger.debug(f"Failed to load theme from config: {e}, using default")
        set_theme(DEFAULT_THEME)


def get_console() -> Console:
    """The active console (modules should call this rather than cache it)."""
    return console


def get_questionary_style() -> QuestionaryStyle:
    return custom_style


# ============================================================================
# STYLE HELPERS
# ============================================================================


class Styles:
    """Style names defined in the Rich theme."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DIM = "dim"
    PRIMARY = "primary"
    BOLD_PRIMARY = "bold_primary"
    HEADER = "header"
    PATH = "path"
    COMMAND = "command"
    ACCENT = "accent"


class Messages:
    """Pre-formatted message helpers for common patterns."""

    @staticmethod
    def success(text: str) -> str:
        return f"[success]✓ {text}[/success]"

    @staticmethod
    def error(text: str) -> str:
        return f"[error]✗ {text}[/error]"

    @staticmethod
    def warning(text: str) -> str:
        return f"[warning]⚠️  {text}[/warning]"

    @staticmethod
    def info(text: str) -> str:
        return f"[info]ℹ️  {text}[/info]"

    @staticmethod
    def command(text: str) -> str:
        return f"[command]{text}[/command]"

    @staticmethod
    def path(text: str) -> str:
        return f"[path]{text}[/path]"


__all__ = [
    "ColorTheme",
    "DEFAULT_THEME",
    "load_theme_from_config",
    "initialize_theme_from_config",
    "set_theme",
    "make_console",
    "console",
    "get_console",
    "get_questionary_style",
    "Styles",
    "Messages",
]
