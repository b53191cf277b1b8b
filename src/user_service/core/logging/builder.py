"""
Logging builder: build a dictConfig mapping from Settings and apply it.

Call `setup_logging(settings)` once at startup (the app factory does this);
afterwards every module just uses `logging.getLogger(__name__)`.

Settings used: LOG_LEVEL, LOG_FORMAT, LOG_TO_STDOUT, LOG_DIR, LOG_MAX_BYTES,
LOG_BACKUP_COUNT, ENABLE_SQL_LOGGING, ENV.
"""

from __future__ import annotations

from pathlib import Path
import logging
import logging.config

from user_service.config.settings import Settings
from user_service.utils.logging import get_project_name

from .formatters import JsonFormatter, ColorFormatter
from .filters import RequestIdFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_error_console_handler,
)


def _writes_files(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping using the provided settings.

    The returned mapping includes:
      - formatters: "standard" (color text or plain) and "json"
      - filters: "request_id", "redact"
      - handlers: console plus file/error_file when writing to LOG_DIR,
        otherwise console plus error_console
      - loggers: root, user_service, uvicorn.error, uvicorn.access, sqlalchemy.engine
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "fmt": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(default="user-service"),
        },
    }

    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}

    if _writes_files(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    handler_names = list(handlers.keys())

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": handler_names,
                "level": settings.LOG_LEVEL,
            },
            "uvicorn.error": {
                "level": settings.LOG_LEVEL,
                "handlers": handler_names,
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Initialize logging from settings.

    Steps:
      1. Ensure LOG_DIR exists when writing files.
      2. Apply dictConfig(make_dict_config(settings)).
      3. Add a RequestIdFilter on the root logger as well, so records that reach
         handlers added later (e.g. pytest's caplog) still carry request_id.
    """
    if _writes_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))
    logging.getLogger().addFilter(RequestIdFilter())
