from .user_validator import (
    BindingResult,
    UserValidator,
    Violation,
    USER_RULES,
    messages_of,
    validate_user,
)

__all__ = [
    "BindingResult",
    "UserValidator",
    "Violation",
    "USER_RULES",
    "messages_of",
    "validate_user",
]
