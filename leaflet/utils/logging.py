"""Logging setup for the documentation generator.

All modules log through ``logging.getLogger(__name__)``, which places
them below the ``leaflet`` package logger configured here. Level,
format and the optional log file come from config.yaml.
"""

import logging
import sys
from typing import Optional

from leaflet.utils.config import LoggingConfig

PACKAGE_LOGGER = "leaflet"


def setup_logging(
    level: str = "INFO",
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Configure the package logger with console and optional file output.

    Existing handlers are cleared first, so calling this again (once
    per CLI invocation, for example) never duplicates log lines.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Format string for log messages.
        log_file: Optional file path for log output.

    Returns:
        The configured package logger.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    package_logger.setLevel(numeric_level)

    formatter = logging.Formatter(log_format)

    # stdout is left to command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    package_logger.debug("Logging initialized at level %s", level)
    return package_logger


def setup_logging_from_config(config: LoggingConfig) -> logging.Logger:
    """Configure logging from the ``logging`` section of the app config."""
    return setup_logging(
        level=config.level,
        log_format=config.format,
        log_file=config.file,
    )
