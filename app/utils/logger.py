# app/utils/logger.py
"""
Logging for the parking backend.

Everything under the ``app`` logger tree goes to the console and, unless
LOG_DIR is empty, to a rotating file. Lines carry the logger name and the
line number, so an allocation or billing message can be traced back to its
call site:

    2026-03-01 09:00:00 | INFO    | app.services.allocation_engine:112 | KA01 parked at [0,0]
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

APP_LOGGER = "app"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _handlers(level: str) -> list:
    handlers = [logging.StreamHandler()]
    if settings.LOG_DIR:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        handlers.append(RotatingFileHandler(
            filename=os.path.join(settings.LOG_DIR, settings.LOG_FILE),
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        ))
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(fmt)
    return handlers


def configure_logging(force: bool = False) -> logging.Logger:
    """Attach handlers to the ``app`` logger once; ``force`` rebuilds them."""
    app_logger = logging.getLogger(APP_LOGGER)
    if app_logger.handlers and not force:
        return app_logger
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    level = settings.LOG_LEVEL.upper()
    app_logger.setLevel(level)
    for handler in _handlers(level):
        app_logger.addHandler(handler)
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    configure_logging()
    if name != APP_LOGGER and not name.startswith(APP_LOGGER + "."):
        name = f"{APP_LOGGER}.{name}"
    return logging.getLogger(name)
