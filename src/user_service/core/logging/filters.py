"""
Logging filters.

RequestIdFilter attaches the current request id (kept in a contextvar, so it
follows the request across awaits) to every LogRecord. RedactFilter masks
sensitive keys passed through `extra={...}`.
"""

import logging
from logging import LogRecord
import contextvars

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None) -> contextvars.Token:
    """
    Set the request id in the current context and return the token to allow reset.
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantee every LogRecord has a `request_id` attribute.

    Precedence: an explicit `extra={"request_id": ...}`, then the contextvar
    set by RequestIDMiddleware, then the sentinel "-".
    Always returns True; it only annotates.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "authorization"}

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = "***REDACTED***"
        return True
