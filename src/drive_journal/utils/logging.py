import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import colorlog

from drive_journal.config import config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "journal.log"

# Django loggers and their level as (normal, debug mode)
DJANGO_LOGGER_LEVELS = {
    "django.db.backends": (logging.WARNING, logging.DEBUG),
    "django.server": (logging.WARNING, logging.INFO),
    "django.request": (logging.ERROR, logging.WARNING),
}


def _console_formatter(use_color: bool) -> logging.Formatter:
    if not use_color:
        return logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    return colorlog.ColoredFormatter(
        "%(log_color)s" + LOG_FORMAT,
        datefmt=DATE_FORMAT,
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white',
        }
    )


def _configure_django_loggers(debug: bool) -> None:
    """SQL echo and request lines are only shown in debug mode."""
    for name, (normal_level, debug_level) in DJANGO_LOGGER_LEVELS.items():
        logging.getLogger(name).setLevel(debug_level if debug else normal_level)


def setup_logging() -> None:
    """
    Configure logging for the CLI and the HTTP service.

    Console output goes to stdout, colored unless disabled; everything is also
    written to a size-rotated ``journal.log`` in the configured log directory.
    """
    log_dir = Path(config.logging.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(config.logging.level)

    # Setup may run twice (CLI callback, then Django runserver)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_console_formatter(config.logging.use_color))
    root_logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=config.logging.max_size_mb * 1024 * 1024,
        backupCount=config.logging.backup_count
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(file_handler)

    _configure_django_loggers(config.service.debug)
