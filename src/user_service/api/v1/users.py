"""
HTTP handlers for the User resource.

Routes are declared in the `ROUTES` table and registered by `build_router()`,
so the full surface of the resource is readable in one place:

    GET    /all            list users
    GET    /search/{id}    one user
    POST   /create         create, body validated while binding
    POST   /createUser     create, body validated by the handler
    PUT    /replace/{id}   replace first name, last name and email
    DELETE /delete/{id}    delete

Path ids must be positive integers that fit in a 64-bit column. FastAPI rejects anything else before the
handler runs, and the global handlers turn that into a 400.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Annotated, Callable

from fastapi import APIRouter, Depends, Path, Response, status
from fastapi.responses import JSONResponse

from user_service.core.dependencies import bind_user, get_user_service, get_user_validator
from user_service.schemas.error import ErrorDetails
from user_service.schemas.user import UserPayload, UserRead
from user_service.services.user_service import UserService
from user_service.validators.user_validator import BindingResult, UserValidator, messages_of

logger = logging.getLogger(__name__)

# largest value an INTEGER primary key holds in SQLite and a BIGINT in Postgres
MAX_USER_ID = 2**63 - 1

UserId = Annotated[int, Path(alias="id", gt=0, le=MAX_USER_ID, description="Positive user id")]

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorDetails, "description": "Validation Error"},
    status.HTTP_404_NOT_FOUND: {"model": ErrorDetails, "description": "User not found"},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorDetails, "description": "Unexpected error"},
}


def validation_error_response(messages: list[str]) -> JSONResponse:
    """400 with ErrorDetails("Validation Error", "[msg, ...]")."""
    body = ErrorDetails.validation(messages)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def get_all_users(service: UserService = Depends(get_user_service)) -> list[UserRead]:
    users = await service.list_users()
    return [UserRead.model_validate(user) for user in users]


async def get_user_by_id(user_id: UserId, service: UserService = Depends(get_user_service)) -> UserRead:
    # UserNotFoundError propagates to the global handler -> 404
    user = await service.get_user(user_id)
    return UserRead.model_validate(user)


async def create_user(
    binding: BindingResult = Depends(bind_user),
    service: UserService = Depends(get_user_service),
):
    """
    Create a user from a body that was validated while it was bound.
    """
    if binding.has_errors():
        logger.info("users.create.validation_failed", extra={"violations": binding.messages})
        return validation_error_response(binding.messages)

    user = await service.create_user(binding.target)
    return UserRead.model_validate(user)


async def create_user_with_validator(
    payload: UserPayload,
    validator: UserValidator = Depends(get_user_validator),
    service: UserService = Depends(get_user_service),
):
    """
    Create a user, validating the body explicitly inside the handler.

    Persistence failures are answered here with a 500 instead of reaching the
    global handlers.
    """
    violations = validator.validate(payload)
    if violations:
        logger.info("users.create.validation_failed", extra={"violations": messages_of(violations)})
        return validation_error_response(messages_of(violations))

    try:
        user = await service.create_user(payload)
    except Exception as exc:
        logger.exception("users.create.failed")
        body = ErrorDetails(message="Error during user creation", details=str(exc))
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump(mode="json"))

    return UserRead.model_validate(user)


async def replace_user(
    user_id: UserId,
    payload: UserPayload,
    validator: UserValidator = Depends(get_user_validator),
    service: UserService = Depends(get_user_service),
):
    """
    Replace first name, last name and email of an existing user.

    The body is validated before the lookup, so an invalid body for a missing
    id answers 400, not 404.
    """
    violations = validator.validate(payload)
    if violations:
        logger.info("users.replace.validation_failed", extra={"id": user_id, "violations": messages_of(violations)})
        return validation_error_response(messages_of(violations))

    user = await service.replace_user(user_id, payload)
    return UserRead.model_validate(user)


async def delete_user(user_id: UserId, service: UserService = Depends(get_user_service)) -> Response:
    await service.delete_user(user_id)
    return Response(status_code=status.HTTP_200_OK)


# ---------------------------------------------------------------------------
# Route table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    endpoint: Callable[..., Any]
    status_code: int
    response_model: Any = None
    summary: str | None = None


ROUTES: tuple[Route, ...] = (
    Route("GET", "/all", get_all_users, status.HTTP_200_OK, list[UserRead], "List users"),
    Route("GET", "/search/{id}", get_user_by_id, status.HTTP_200_OK, UserRead, "Get a user by id"),
    Route("POST", "/create", create_user, status.HTTP_201_CREATED, UserRead, "Create a user"),
    Route("POST", "/createUser", create_user_with_validator, status.HTTP_201_CREATED, UserRead,
          "Create a user (explicit validation)"),
    Route("PUT", "/replace/{id}", replace_user, status.HTTP_200_OK, UserRead, "Replace a user's details"),
    Route("DELETE", "/delete/{id}", delete_user, status.HTTP_200_OK, None, "Delete a user"),
)


def build_router(prefix: str = "/api/users") -> APIRouter:
    """Create the users router from `ROUTES`."""
    router = APIRouter(prefix=prefix, tags=["users"])
    for route in ROUTES:
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            status_code=route.status_code,
            response_model=route.response_model,
            summary=route.summary,
            responses=ERROR_RESPONSES,
        )
    return router
