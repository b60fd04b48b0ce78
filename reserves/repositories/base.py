"""
Base Repository

Base class for all repositories.
Provides common database operations and translates driver errors
into the application's error types.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Generic, TypeVar, Type, Optional, List, Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reserves.core.exceptions import ConflictError, NotFoundError, TransientStoreError

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """
    Base repository class with common CRUD operations.

    All repositories should inherit from this class.
    """
    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # -----------------------------
    # Error translation
    # -----------------------------
    @asynccontextmanager
    async def guard(self, operation: str):
        """
        Roll back and re-raise store failures as domain errors.

        IntegrityError becomes ConflictError; any other driver or
        connection failure becomes TransientStoreError.
        """
        try:
            yield
        except IntegrityError as e:
            await self._safe_rollback()
            logger.warning(f"{operation}: integrity violation on {self.model.__name__}")
            raise ConflictError(f"{self.model.__name__} already exists") from e
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            await self._safe_rollback()
            logger.error(f"{operation} failed on {self.model.__name__}: {e}")
            raise TransientStoreError(f"{operation} failed") from e

    async def _safe_rollback(self) -> None:
        try:
            await self.db.rollback()
        except Exception as e:
            logger.debug(f"Rollback after failure also failed: {e}")

    # -----------------------------
    # Get Element By id
    # -----------------------------
    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        """Get a record by ID."""
        async with self.guard("get_by_id"):
            result = await self.db.execute(
                select(self.model).where(self.model.id == id)
            )
            return result.scalar_one_or_none()

    async def get_or_404(self, id: Any) -> ModelType:
        """Get a record by ID or raise NotFoundError."""
        instance = await self.get_by_id(id)
        if instance is None:
            raise NotFoundError(f"{self.model.__name__} {id} not found")
        return instance

    # -----------------------------
    # Get all Records
    # -----------------------------
    async def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by=None
    ) -> List[ModelType]:
        """Get all records with pagination."""
        query = select(self.model)

        if order_by is not None:
            query = query.order_by(order_by)

        query = query.offset(skip).limit(limit)
        async with self.guard("get_all"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    # -----------------------------
    # Create Single Record
    # -----------------------------
    async def create(self, **kwargs) -> ModelType:
        """Create a new record."""
        instance = self.model(**kwargs)
        async with self.guard("create"):
            self.db.add(instance)
            await self.db.commit()
            await self.db.refresh(instance)
        return instance

    # -----------------------------
    # Update record
    # -----------------------------
    async def update(self, id: Any, **kwargs) -> ModelType:
        """Update a record by ID. Raises NotFoundError if missing."""
        instance = await self.get_or_404(id)

        for key, value in kwargs.items():
            setattr(instance, key, value)

        async with self.guard("update"):
            await self.db.commit()
            await self.db.refresh(instance)
        return instance

    # -----------------------------
    # Delete record
    # -----------------------------
    async def delete(self, id: Any) -> ModelType:
        """Delete a record by ID and return it. Raises NotFoundError if missing."""
        instance = await self.get_or_404(id)

        async with self.guard("delete"):
            await self.db.delete(instance)
            await self.db.commit()
        return instance
