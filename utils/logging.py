# utils/logging.py

"""Logging helpers for the movies data-access layer."""

from __future__ import annotations

import logging
import logging.handlers
import os

import structlog
from config import settings
from rich.logging import RichHandler

logger = structlog.get_logger(__name__)

__all__ = ["setup_logging"]

_LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
_LOG_FILE_BACKUPS = 5

# Driver loggers that are too chatty at the application's level.
_QUIET_DRIVER_LOGGERS = ("neo4j.notifications",)


def _plain_formatter() -> logging.Formatter:
    return logging.Formatter(settings.LOG_FORMAT, datefmt=settings.LOG_DATE_FORMAT)


def _log_file_path() -> str:
    if os.path.isabs(settings.LOG_FILE):
        return settings.LOG_FILE
    return os.path.join(settings.LOG_DIR, settings.LOG_FILE)


def _file_handler() -> logging.Handler | None:
    """Return a rotating handler for ``settings.LOG_FILE``, or ``None`` if unset."""
    if not settings.LOG_FILE:
        return None
    path = _log_file_path()
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=_LOG_FILE_MAX_BYTES,
        backupCount=_LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setFormatter(_plain_formatter())
    return handler


def _console_handler() -> logging.Handler:
    if settings.ENABLE_RICH_LOGGING:
        return RichHandler(
            level=settings.LOG_LEVEL_STR,
            rich_tracebacks=True,
            show_path=False,
            markup=False,
        )
    handler = logging.StreamHandler()
    handler.setFormatter(_plain_formatter())
    return handler


def _route_driver_logs() -> None:
    # The neo4j driver logs through the standard library; without a level of
    # its own it would inherit the root level and its handlers.
    logging.getLogger("neo4j").setLevel(settings.LOG_LEVEL_STR)
    for name in _QUIET_DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging() -> None:
    """Configure structlog on top of standard logging.

    Event keywords become ``LogRecord`` attributes, so they must not reuse
    reserved names such as ``name`` or ``message``.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(settings.LOG_LEVEL_STR)

    try:
        file_handler = _file_handler()
    except OSError as exc:  # pragma: no cover - path issues
        file_handler = None
        logger.error("Cannot open log file", path=_log_file_path(), error=str(exc))
    if file_handler is not None:
        root_logger.addHandler(file_handler)
    root_logger.addHandler(_console_handler())
    _route_driver_logs()

    logger.info(
        "Logging configured",
        log_level=logging.getLevelName(root_logger.level),
        log_file=_log_file_path() if file_handler is not None else None,
    )
