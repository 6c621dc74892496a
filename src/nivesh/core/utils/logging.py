"""
Logging configuration using loguru.

Library modules log through ``loguru.logger`` directly and never configure
sinks; the CLI calls ``setup_logging_from_config`` once at startup.
"""

import sys

from loguru import logger

from nivesh.core.config import Config

CONSOLE_FORMAT = "<level>[{level.name}]</level> {message}"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Replace loguru's sinks with a stderr sink and an optional rotating file.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Path to log file. If None, only logs to stderr.
        rotation: Log file rotation size.
        retention: How long to keep rotated logs.
    """
    level = level.upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)

    if log_file:
        logger.add(log_file, level=level, format=FILE_FORMAT, rotation=rotation, retention=retention)


def setup_logging_from_config(config: Config) -> None:
    """Configure sinks from the ``logging`` section of ``config``."""
    settings = config.validated().logging
    setup_logging(level=settings.level, log_file=settings.file)
