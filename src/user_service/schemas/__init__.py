from .error import ErrorDetails, VALIDATION_ERROR, format_messages
from .user import UserPayload, UserRead

__all__ = [
    "ErrorDetails",
    "VALIDATION_ERROR",
    "format_messages",
    "UserPayload",
    "UserRead",
]
