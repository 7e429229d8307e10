# backend/wedding_app/core/logger.py

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from wedding_app.core.config_loader import settings


LOGGER_NAME = "wedding_genie"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"

# Relative LOG_DIR values are resolved against backend/
BACKEND_DIR = Path(__file__).resolve().parents[2]


def _log_file() -> Path:
    log_dir = Path(settings.LOG_DIR)
    if not log_dir.is_absolute():
        log_dir = BACKEND_DIR / log_dir
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "app.log"


def configure_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """
    Rotating file (5 MB x 5, INFO and up) plus console at LOG_LEVEL.
    Safe to call again on reload; handlers are only attached once.
    """
    log = logging.getLogger(name)
    if log.handlers:
        return log

    formatter = logging.Formatter(LOG_FORMAT)
    console_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.DEBUG)

    file_handler = RotatingFileHandler(
        _log_file(),
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(console_level)

    log.setLevel(min(console_level, logging.INFO))
    log.addHandler(file_handler)
    log.addHandler(console_handler)
    return log


logger = configure_logger()
