# user_service/exceptions/
# ├── base.py                    # App-level errors (RepositoryError, UserNotFoundError, ...)
# ├── integrity_classifier.py    # SQL-level / DB-specific errors
# └── mapper.py                  # Map SQL-level errors to app-level errors

from .base import (
    RepositoryError,
    ResourceNotFoundError,
    UserNotFoundError,
    DuplicateError,
    InvalidFieldError,
)

__all__ = [
    "RepositoryError",
    "ResourceNotFoundError",
    "UserNotFoundError",
    "DuplicateError",
    "InvalidFieldError",
]
