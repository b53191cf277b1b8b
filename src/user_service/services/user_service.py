"""
User use-cases on top of `UserRepository`.

The service owns the transaction: repositories flush, the service commits once
a mutation succeeded. It is also where an empty lookup becomes
`UserNotFoundError`, which the global handlers render as a 404.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from user_service.exceptions.base import UserNotFoundError
from user_service.exceptions.mapper import db_error_handler
from user_service.models.user import User
from user_service.repositories.user_repository import UserRepository
from user_service.schemas.user import UserPayload

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, session: AsyncSession, repository: UserRepository | None = None):
        self.session = session
        self.repository = repository or UserRepository(session)

    async def _commit(self) -> None:
        async with db_error_handler(self.session, User.__name__):
            await self.session.commit()

    async def list_users(self) -> list[User]:
        return await self.repository.find_all()

    async def get_user(self, user_id: int) -> User:
        """
        Return the stored user or raise UserNotFoundError.
        """
        user = await self.repository.find_by_id(user_id)
        if user is None:
            logger.info("users.not_found", extra={"id": user_id})
            raise UserNotFoundError(user_id)
        return user

    async def create_user(self, payload: UserPayload) -> User:
        """
        Persist a validated candidate. Any client-supplied id is ignored.
        """
        user = await self.repository.create_user(**payload.to_fields())
        await self._commit()
        logger.info("users.created", extra={"id": user.id})
        return user

    async def replace_user(self, user_id: int, payload: UserPayload) -> User:
        """
        Overwrite firstName, lastName and email of an existing user; the id is kept.

        Raises:
            UserNotFoundError: no user with `user_id`.
        """
        existing = await self.get_user(user_id)
        user = await self.repository.replace_user(existing, **payload.to_fields())
        await self._commit()
        logger.info("users.replaced", extra={"id": user.id})
        return user

    async def delete_user(self, user_id: int) -> None:
        existing = await self.get_user(user_id)
        await self.repository.delete_user(existing)
        await self._commit()
        logger.info("users.deleted", extra={"id": user_id})
