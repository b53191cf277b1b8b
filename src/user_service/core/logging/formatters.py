"""
Log formatters.

  - JsonFormatter: one JSON object per line for log collectors. Always includes
    service, env, version and request_id; anything passed via `extra={...}` is
    added as a top-level key.
  - ColorFormatter: compact ANSI-colored lines for a developer terminal.

builder.py picks one of them per handler based on LOG_FORMAT.
"""

import json
import logging
from typing import Any
from logging import LogRecord
from user_service.utils.logging import get_project_version

PROJECT_VERSION = get_project_version()

# Attributes every LogRecord carries; they are not "extras".
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """
    Structured JSON formatter.

    Construction:
      - env: environment name (e.g., "development" | "production"); optional.
      - service: logical service name to include in logs.
      - datefmt: optional date format passed to logging.Formatter.formatTime.

    Non-serializable extras are converted with str(), so format() never raises
    on odd payloads.
    """

    def __init__(self, *, env: str | None = None, service: str | None = "user-service", datefmt: str | None = None):
        super().__init__(datefmt=datefmt)
        self.env = env
        self.service = service or "user-service"

    def format(self, record: LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
            "request_id": getattr(record, "request_id", "-"),
            "service": self.service,
            "env": self.env,
            "version": PROJECT_VERSION,
        }

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in log_record or key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                log_record[key] = value
            except (TypeError, ValueError):
                log_record[key] = str(value)

        return json.dumps(log_record, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """
    Development formatter: TIMESTAMP | LEVEL | LOGGER | REQUEST_ID | MESSAGE,
    with the level colored and any traceback appended on the next lines.
    """

    COLOR_CODES = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;41m",
        "RESET": "\033[0m",
    }

    def __init__(self, fmt: str | None = None, datefmt: str | None = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)

    def format(self, record: LogRecord) -> str:
        color = self.COLOR_CODES.get(record.levelname, "")
        reset = self.COLOR_CODES["RESET"]
        timestamp = self.formatTime(record, self.datefmt)

        base = (
            f"{timestamp} | {color}{record.levelname:<8}{reset} | "
            f"{record.name:<30} | "
            f"{getattr(record, 'request_id', '-'):<36} | "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            base = base + "\n" + self.formatException(record.exc_info)

        return base
