"""Logging configuration utilities for remote-config-provider.

Every module logs through loguru. Poll results and registry changes are logged at DEBUG/INFO, failed polls at
WARNING. Importing the package leaves loguru's handlers untouched unless REMOTE_CONFIG_PROVIDER_LOG_LEVEL is set,
in which case `__init__.py` calls `configure_logger` with that level.
"""

import sys
from typing import Literal

from loguru import logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]

PACKAGE_LOGGER_NAME = "remote_config_provider"

DEFAULT_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def configure_logger(
    level: LogLevel = "WARNING",
    *,
    format_string: str | None = None,
    colorize: bool = True,
) -> None:
    """Replace loguru's handlers with a single stderr sink and re-enable this package's records.

    Args:
        level: The minimum log level to display.
        format_string: Custom format string for log messages. If None, uses `DEFAULT_LOG_FORMAT`.
        colorize: Whether to use colored output (default: True)

    Examples:
        ```python
        from remote_config_provider.logging_config import configure_logger

        # See every poll of every watched provider
        configure_logger("DEBUG")
        ```

    Note:
        The same can be done without code changes:

        ```bash
        export REMOTE_CONFIG_PROVIDER_LOG_LEVEL=DEBUG
        python your_app.py
        ```
    """
    logger.remove()
    logger.enable(PACKAGE_LOGGER_NAME)
    logger.add(
        sys.stderr,
        level=level,
        format=format_string if format_string is not None else DEFAULT_LOG_FORMAT,
        colorize=colorize,
    )


def disable_logging() -> None:
    """Drop every record emitted by remote-config-provider.

    The application's own handlers and records are left alone. Call `configure_logger` to turn the package's
    output back on.
    """
    logger.disable(PACKAGE_LOGGER_NAME)


def enable_debug_logging() -> None:
    """Equivalent to `configure_logger("DEBUG")`, for troubleshooting watch loops."""
    configure_logger("DEBUG")


__all__ = [
    "DEFAULT_LOG_FORMAT",
    "LogLevel",
    "PACKAGE_LOGGER_NAME",
    "configure_logger",
    "disable_logging",
    "enable_debug_logging",
]
