"""Wire shapes for the User resource (camelCase on the wire, snake_case in Python)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class UserPayload(BaseModel):
    """
    Candidate user bound from a request body.

    Every field is optional at this level: the request-binding layer only checks
    JSON types, the field rules live in `user_service.validators.user_validator`
    so both validation call sites share them. A client-supplied `id` is accepted
    and ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None

    def to_fields(self) -> dict[str, str | None]:
        """Column values for persistence; `id` is dropped on purpose."""
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
        }


class UserRead(BaseModel):
    """A stored user as returned to clients."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    first_name: str
    last_name: str
    email: str | None = None
