"""Configures the 'tilewave' logger hierarchy.

All tilewave modules log through 'logging.getLogger(__name__)' and never configure handlers themselves, so library
users keep full control. Applications (like the command line entry point) call 'setup_logging()' once at startup.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys

from tilewave.constants import LOG_BACKUP_COUNT, LOG_MAX_SIZE, LOGGER_NAME


def setup_logging(console_level: int = logging.WARNING, log_file: str | Path | None = None) -> logging.Logger:
    """Configures console (and optionally file) logging for all tilewave loggers.

    Calling this again replaces the handlers installed by the previous call.

    Args:
        console_level: Level for the stderr handler.
        log_file: Optional path of a rotating log file receiving DEBUG and above.

    Returns:
        The configured 'tilewave' root logger.
    """
    root_logger = logging.getLogger(LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(fmt="%(levelname)-8s | %(name)-30s | %(message)s"))
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=LOG_MAX_SIZE,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-30s | %(funcName)-20s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

    return root_logger
