import re
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .integrity_classifier import (
    classify_integrity_error,
    UniqueConstraintError,
    NotNullConstraintError,
    CheckConstraintError,
)
from .base import DuplicateError, RepositoryError

logger = logging.getLogger(__name__)

# Postgres: 'null value in column "first_name" ...' / 'Key (email)=(...) already exists.'
_PG_NOT_NULL = re.compile(r'null value in column "(?P<col>[^"]+)"', re.IGNORECASE)
_PG_KEY = re.compile(r'key \((?P<cols>[^)]+)\)=', re.IGNORECASE)
# SQLite: 'NOT NULL constraint failed: users.first_name'
_SQLITE_FAILED = re.compile(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$', re.IGNORECASE)


def extract_columns_from_integrity(exc: IntegrityError) -> list[str] | None:
    """
    Best-effort extraction of column names from the DB message (Postgres, SQLite).
    """
    msg = str(exc.orig) if exc.orig is not None else str(exc)
    if not msg:
        return None

    m = _PG_NOT_NULL.search(msg)
    if m:
        return [m.group("col")]

    m = _PG_KEY.search(msg)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    m = _SQLITE_FAILED.search(msg)
    if m:
        return [c.split(".")[-1].strip() for c in re.split(r",\s*", m.group("cols"))]

    return None


def raise_mapped_integrity_error(exc: IntegrityError, model_name: str | None = None) -> None:
    """
    Map a SQLAlchemy IntegrityError to an app-level exception and raise it.
    Populates `.fields` and `.constraint` where possible.
    """
    exc_cls, constraint_name = classify_integrity_error(exc)
    columns = extract_columns_from_integrity(exc)
    model_part = model_name or "Record"

    if exc_cls is UniqueConstraintError:
        logger.info(
            "mapper.duplicate_detected",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise DuplicateError(f"{model_part} already exists for field(s): {', '.join(columns)}",
                                 fields=columns, constraint=constraint_name) from exc
        raise DuplicateError(f"{model_part} already exists", constraint=constraint_name) from exc

    if exc_cls is NotNullConstraintError:
        logger.info(
            "mapper.not_null_violation",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise RepositoryError(f"Missing required field(s): {', '.join(columns)} for {model_part}",
                                  fields=columns, constraint=constraint_name) from exc
        raise RepositoryError(f"Missing required field for {model_part}", constraint=constraint_name) from exc

    if exc_cls is CheckConstraintError:
        # raw DB text stays at DEBUG; the raised message is generic
        logger.debug(
            "mapper.check_constraint_failure",
            extra={"model": model_part, "raw": str(exc.orig), "constraint": constraint_name},
        )
        raise RepositoryError(f"{model_part} business rule violated (check constraint).",
                              constraint=constraint_name) from exc

    logger.warning("mapper.unknown_integrity_error", extra={"model": model_part, "constraint": constraint_name})
    raise RepositoryError(f"{model_part} database integrity error.") from exc


async def _safe_rollback(db: AsyncSession, model_name: str | None) -> None:
    try:
        await db.rollback()
    except Exception:
        logger.exception("Failed to rollback session", extra={"model": model_name})


@asynccontextmanager
async def db_error_handler(db: AsyncSession, model_name: str | None = None) -> AsyncIterator[None]:
    """
    Usage:
        async with db_error_handler(self.db, self.model.__name__):
            ... DB ops that may raise IntegrityError ...
    Rolls back on error and raises a mapped app-level exception.
    App-level errors raised inside the block pass through untouched.
    """
    try:
        yield
    except RepositoryError:
        await _safe_rollback(db, model_name)
        raise
    except IntegrityError as exc:
        await _safe_rollback(db, model_name)
        raise_mapped_integrity_error(exc, model_name)
    except Exception as exc:
        await _safe_rollback(db, model_name)
        logger.exception("Unexpected DB error for %s", model_name, extra={"model": model_name})
        raise RepositoryError(f"Failed to operate on {model_name or 'database'}") from exc
