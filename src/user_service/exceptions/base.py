"""
Application exceptions raised by the repository and service layers.

Every exception knows the HTTP status it maps to (`http_status()`) and how to
render itself as the uniform `ErrorDetails` body (`to_error_details()`), so the
handlers in `user_service.api.v1.error_handlers` stay tiny.
"""

from typing import Iterable

from user_service.schemas.error import ErrorDetails


class RepositoryError(Exception):
    """
    Base exception for repository/service errors.

    - message: human-friendly message (safe to show to clients)
    - fields: optional list of field names related to the error (e.g., ['email'])
    - constraint: optional DB constraint name or identifier (for logs only)
    - error_code: canonical short code (e.g., 'not_found') used to pick the HTTP status
    """

    # Map canonical error_code -> HTTP status.
    ERROR_CODE_TO_STATUS = {
        "not_found": 404,
        "invalid_input": 400,
        "invalid_field": 422,
        "duplicate": 409,
        # fallback: anything else is a server-side failure
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message  # user-friendly message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base

    def to_error_details(self, details: str = "") -> ErrorDetails:
        """
        Return the ErrorDetails body for this error.

        Only `message` goes to the client; the constraint name stays in the logs.
        """
        return ErrorDetails(message=self.message, details=details)

    def http_status(self) -> int:
        """
        HTTP status for this error, looked up from `error_code`.
        Errors without a known code are server-side failures (500).
        """
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 500)
        return 500


class ResourceNotFoundError(RepositoryError):
    """A referenced resource has no stored row."""

    def __init__(self, message: str = "Resource not found", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="not_found")


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: int):
        super().__init__(f"User not found with id :: {user_id}", fields=["id"])
        self.user_id = user_id


class DuplicateError(RepositoryError):
    def __init__(self, message: str, *, fields: Iterable[str] | None = None, constraint: str | None = None):
        super().__init__(message, fields=fields, constraint=constraint, error_code="duplicate")


class InvalidFieldError(RepositoryError):
    """Raised when the caller passes unexpected/unknown fields to repository methods."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="invalid_field")


__all__ = [
    "RepositoryError",
    "ResourceNotFoundError",
    "UserNotFoundError",
    "DuplicateError",
    "InvalidFieldError",
]
