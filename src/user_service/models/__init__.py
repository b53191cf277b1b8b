"""
Single import point for the service's ORM models.

Importing this package registers every model on `Base.metadata`, which is
what `create_all()` and the test fixtures rely on:

    from user_service.models import User
"""

from .user import User

__all__ = [
    "User",
]
