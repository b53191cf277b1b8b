from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from user_service.database.session import get_async_session
from user_service.schemas.user import UserPayload
from user_service.services.user_service import UserService
from user_service.validators.user_validator import BindingResult, UserValidator

_VALIDATOR = UserValidator()


def get_user_validator() -> UserValidator:
    # Stateless; one instance serves every request
    return _VALIDATOR


async def get_user_service(session: AsyncSession = Depends(get_async_session)) -> UserService:
    return UserService(session)


def bind_user(
    payload: UserPayload,
    validator: UserValidator = Depends(get_user_validator),
) -> BindingResult:
    """
    Bind the request body and validate it before the handler runs.

    The handler receives the BindingResult and decides how to answer errors.
    """
    return validator.bind(payload)
