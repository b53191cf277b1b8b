"""
Handler factories for logging.dictConfig.

Each function returns a handler configuration dict; builder.py registers them
under the names "console", "file", "error_file" and "error_console".
"""

from pathlib import Path

from user_service.config.settings import Settings


def _formatter_name(settings: Settings) -> str:
    return "json" if settings.LOG_FORMAT == "json" else "standard"


def get_console_handler(settings: Settings) -> dict:
    """
    Stream handler on stdout so container log collectors pick it up.
    """
    return {
        "class": "logging.StreamHandler",
        "stream": "ext://sys.stdout",
        "formatter": _formatter_name(settings),
        "level": settings.LOG_LEVEL,
        "filters": ["request_id", "redact"],
    }


def get_file_handler(settings: Settings) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": _formatter_name(settings),
        "level": settings.LOG_LEVEL,
        "filename": str(Path(settings.LOG_DIR) / "app.log"),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
        "filters": ["request_id", "redact"],
    }


def get_error_file_handler(settings: Settings) -> dict:
    # error files stay structured regardless of LOG_FORMAT
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "json",
        "level": "ERROR",
        "filename": str(Path(settings.LOG_DIR) / "errors.log"),
        "maxBytes": settings.LOG_MAX_BYTES,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
        "filters": ["request_id", "redact"],
    }


def get_error_console_handler(settings: Settings) -> dict:
    return {
        "class": "logging.StreamHandler",
        "stream": "ext://sys.stderr",
        "formatter": "json",
        "level": "ERROR",
        "filters": ["request_id", "redact"],
    }
