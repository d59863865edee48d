"""Temporary log suppression.

The live status view redraws a table in place; log lines from the engine and
batch loggers would tear it, so it quiets them while it runs.

Examples:
    >>> with quiet_logger("dsctl.engine"):
    ...     adapter.up("web")   # WARNING and above still shown
    >>> with quiet_logger(["dsctl.engine", "dsctl.batch"], logging.ERROR):
    ...     run_live(...)
"""

import logging
from contextlib import contextmanager


@contextmanager
def suppress_logger_level(logger_name: str | list[str], level: int):
    """Temporarily raise the level of one or more loggers.

    Yields:
        Dictionary mapping logger names to their original levels
    """
    logger_names = [logger_name] if isinstance(logger_name, str) else logger_name

    loggers = [logging.getLogger(name) for name in logger_names]
    original_levels = {name: logger.level for name, logger in zip(logger_names, loggers)}

    for logger in loggers:
        logger.setLevel(level)

    try:
        yield original_levels
    finally:
        for name, logger in zip(logger_names, loggers):
            logger.setLevel(original_levels[name])


@contextmanager
def quiet_logger(logger_name: str | list[str], level: int = logging.WARNING):
    """Suppress messages below ``level`` (INFO and DEBUG by default)."""
    with suppress_logger_level(logger_name, level) as levels:
        yield levels


__all__ = ["suppress_logger_level", "quiet_logger"]
