"""
Base repository class providing common database operations.

Model-specific repositories inherit from `BaseRepository` to reuse the generic
CRUD logic and add their own queries on top.

Repositories only `flush()`; committing is the caller's job (see
`user_service.services.user_service`), so one request maps to one transaction.
"""
from user_service.exceptions.base import RepositoryError, InvalidFieldError
from user_service.exceptions.mapper import db_error_handler
from user_service.validators.model_validators import find_unknown_model_kwargs

import time
from typing import TypeVar, Generic, Type, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
import logging

from user_service.database.base import Base

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Args:
            model: The SQLAlchemy model class (User, not User())
            db: The async database session, injected per request
        """
        self.model = model
        self.db = db

    # =================================================================================================================
    # Create
    # =================================================================================================================

    async def create(self, **kwargs) -> ModelType:
        """
        Insert a new row and return it with server-generated fields populated.

        Logging:
        - DEBUG: start event with model name and provided keys (not values).
        - INFO: rejected unknown fields; success with id and duration_ms.
        """
        logger.debug(
            "repo.create.start",
            extra={
                "model": self.model.__name__,
                "operation": "create",
                "provided_keys": sorted(kwargs.keys()),
            },
        )

        unknown = find_unknown_model_kwargs(self.model, kwargs)
        if unknown:
            logger.info(
                "repo.create.invalid_fields",
                extra={
                    "model": self.model.__name__,
                    "operation": "create",
                    "invalid_fields": sorted(unknown),
                },
            )
            raise InvalidFieldError(f"Unknown field(s) for {self.model.__name__}: {', '.join(unknown)}", fields=unknown)

        start = time.perf_counter()

        async with db_error_handler(self.db, self.model.__name__):
            entity = self.model(**kwargs)
            self.db.add(entity)
            # flush sends the INSERT so the generated id is available; refresh reloads server defaults
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.create.success",
            extra={
                "model": self.model.__name__,
                "operation": "create",
                "id": getattr(entity, "id", None),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    # =================================================================================================================
    # Read
    # =================================================================================================================

    async def get_by_id(self, entity_id: Any) -> ModelType | None:
        """
        Get an entity by its primary key.

        Returns:
            The entity if found, otherwise None. Absence is a normal outcome,
            not an error; callers decide what "not found" means for them.

        Raises:
            RepositoryError: If the query itself fails.
        """
        try:
            entity = await self.db.get(self.model, entity_id)
        except Exception as e:
            logger.error(f"Error retrieving {self.model.__name__} by ID {entity_id}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model.__name__}") from e

        logger.debug(
            "repo.get_by_id",
            extra={"model": self.model.__name__, "id": entity_id, "found": entity is not None},
        )
        return entity

    async def get_all(self, order_by: str | None = None) -> list[ModelType]:
        """
        Get all entities, ordered by `order_by` when it names a column, else by primary key.

        Returns:
            A list of model instances (empty if none found).
        """
        query = select(self.model)

        if order_by and hasattr(self.model, order_by):
            query = query.order_by(getattr(self.model, order_by))
        else:
            if order_by:
                logger.warning(
                    f"Ignored invalid 'order_by' field: '{order_by}' does not exist on {self.model.__name__}")
            query = query.order_by(*self.model.__table__.primary_key.columns)

        try:
            result = await self.db.execute(query)
            entities = list(result.scalars().all())
        except Exception as e:
            logger.error(f"Error retrieving all {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model.__name__} entities") from e

        logger.debug(f"Retrieved {len(entities)} {self.model.__name__} entities")
        return entities

    async def count(self) -> int:
        try:
            result = await self.db.execute(select(func.count()).select_from(self.model))
        except Exception as e:
            logger.error(f"Error counting {self.model.__name__}: {e}")
            raise RepositoryError(f"Failed to count {self.model.__name__} entities") from e
        return result.scalar() or 0

    # =================================================================================================================
    # Update / Delete
    # =================================================================================================================

    async def update_entity(self, entity: ModelType, **values: Any) -> ModelType:
        """
        Overwrite the given attributes on an already loaded entity and flush.

        Only the named attributes change; the primary key and anything not
        listed keep their stored values.

        Raises:
            InvalidFieldError: If a key is not a mapped attribute of the model.
        """
        unknown = find_unknown_model_kwargs(self.model, values)
        if unknown:
            raise InvalidFieldError(f"Unknown field(s) for {self.model.__name__}: {', '.join(unknown)}", fields=unknown)

        async with db_error_handler(self.db, self.model.__name__):
            for key, value in values.items():
                setattr(entity, key, value)
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.update.success",
            extra={"model": self.model.__name__, "operation": "update", "id": getattr(entity, "id", None),
                   "updated_keys": sorted(values.keys())},
        )
        return entity

    async def delete_entity(self, entity: ModelType) -> None:
        """Delete an already loaded entity and flush."""
        entity_id = getattr(entity, "id", None)
        async with db_error_handler(self.db, self.model.__name__):
            await self.db.delete(entity)
            await self.db.flush()

        logger.info(
            "repo.delete.success",
            extra={"model": self.model.__name__, "operation": "delete", "id": entity_id},
        )
