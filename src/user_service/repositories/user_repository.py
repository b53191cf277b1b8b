"""
Persistence gateway for the `users` table.

Adds the user-specific vocabulary (create/replace/delete a user) on top of the
generic operations in `BaseRepository`. Lookups return `User | None`; turning
absence into a 404 is the service's decision.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from user_service.models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for User rows.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def find_all(self) -> list[User]:
        """All users in primary-key order."""
        return await self.get_all(order_by="id")

    async def find_by_id(self, user_id: int) -> User | None:
        return await self.get_by_id(user_id)

    async def create_user(self, first_name: str, last_name: str, email: str | None = None) -> User:
        """
        Insert a user. The id is always generated by the database.
        """
        return await self.create(
            first_name=first_name,
            last_name=last_name,
            email=email,
        )

    async def replace_user(self, user: User, *, first_name: str, last_name: str, email: str | None) -> User:
        """
        Overwrite first name, last name and email of a stored user; id is untouched.
        """
        logger.debug("repo.user.replace", extra={"id": user.id})
        return await self.update_entity(
            user,
            first_name=first_name,
            last_name=last_name,
            email=email,
        )

    async def delete_user(self, user: User) -> None:
        await self.delete_entity(user)
