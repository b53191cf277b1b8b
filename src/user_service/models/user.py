from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from user_service.database.base import Base


class User(Base):
    """
    SQLAlchemy model for User.

    A stored user always satisfies the field rules in
    `user_service.validators.user_validator`; candidates are checked before
    they reach this model.
    """
    __tablename__ = "users"

    # Server-generated identifier; never taken from the client payload
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    first_name: Mapped[str] = mapped_column(
        "first_name",
        String(255),
        nullable=False
    )

    last_name: Mapped[str] = mapped_column(
        "last_name",
        String(255),
        nullable=False
    )

    # Email is optional: only its syntax is checked when present
    email: Mapped[str | None] = mapped_column(
        "email",
        String(320),
        nullable=True
    )

    def __repr__(self) -> str:
        # Helpful for debugging/logging
        return f"<User(id={self.id!r}, first_name={self.first_name!r}, last_name={self.last_name!r})>"
