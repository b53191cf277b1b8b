"""
Classify SQLAlchemy IntegrityErrors into constraint-level exceptions.

These classes are internal labels ("what exactly failed in the database").
`mapper.py` turns them into the app-level errors from `base.py`; they are never
raised to API callers directly.
"""
import logging
from enum import Enum
from typing import Type
from sqlalchemy.exc import IntegrityError
from .base import RepositoryError

logger = logging.getLogger(__name__)


class ConstraintViolationError(RepositoryError):
    """Base for integrity/constraint violations."""
    pass


class UniqueConstraintError(ConstraintViolationError):
    pass


class NotNullConstraintError(ConstraintViolationError):
    pass


class CheckConstraintError(ConstraintViolationError):
    pass


class UnknownIntegrityError(ConstraintViolationError):
    pass


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    CHECK_VIOLATION = "23514"


PGCODE_EXCEPTION_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION.value: UniqueConstraintError,
    PostgresErrorCodes.NOT_NULL_VIOLATION.value: NotNullConstraintError,
    PostgresErrorCodes.CHECK_VIOLATION.value: CheckConstraintError,
}

# Substrings seen in SQLite / MySQL / asyncpg messages, checked in order.
MESSAGE_KEYWORDS: list[tuple[Type[ConstraintViolationError], tuple[str, ...]]] = [
    (UniqueConstraintError, ("unique constraint", "unique failed", "unique violation", "duplicate")),
    (NotNullConstraintError, ("not null constraint", "not null", "null value in column")),
    (CheckConstraintError, ("check constraint", "check failed")),
]


def _pgcode(orig) -> tuple[str | None, str | None]:
    # psycopg exposes `pgcode`, asyncpg exposes `sqlstate`
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None) if diag else getattr(orig, "constraint_name", None)
    return code, constraint_name


def classify_integrity_error(exc: IntegrityError) -> tuple[Type[ConstraintViolationError], str | None]:
    """
    Classify an IntegrityError into a ConstraintViolationError subclass.

    Returns:
        A tuple of (ExceptionClass, constraint_name if available)
    """
    orig = exc.orig
    code, constraint_name = _pgcode(orig)

    if code:
        exception_class = PGCODE_EXCEPTION_MAP.get(code)
        if exception_class:
            logger.debug("integrity.postgres_diagnostic", extra={"pgcode": code, "constraint_name": constraint_name})
            return exception_class, constraint_name
        logger.warning("integrity.unknown_pgcode", extra={"pgcode": code, "constraint_name": constraint_name})
        return UnknownIntegrityError, constraint_name

    normalized = str(orig).lower()
    for exception_class, keywords in MESSAGE_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return exception_class, None

    logger.warning("integrity.unknown_message", extra={"message_snippet": normalized[:200]})
    return UnknownIntegrityError, None
