"""Uniform error payload returned by every failing endpoint."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

VALIDATION_ERROR = "Validation Error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_messages(messages: Iterable[str]) -> str:
    """Render messages as one bracketed, comma-separated string: "[a, b]"."""
    return "[" + ", ".join(messages) + "]"


class ErrorDetails(BaseModel):
    """
    Immutable error body: when it happened, a short classification, and context.

    Example:
        {"timestamp": "2026-10-19T10:00:00Z", "message": "Validation Error",
         "details": "[invalid email address]"}
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=_utcnow)
    message: str
    details: str = ""

    @classmethod
    def validation(cls, messages: Iterable[str]) -> "ErrorDetails":
        return cls(message=VALIDATION_ERROR, details=format_messages(messages))
