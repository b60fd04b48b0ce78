"""
Assignment Repositories

Data access for the four assignment tables. Every table is keyed by
(entity_id, user_id) and carries a completion status, so one generic
repository serves all of them; the subclasses only bind the model.
"""

import logging
from typing import Any, List, Optional, Type, TypeVar, Union
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from reserves.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from reserves.models.assignment import AssignmentBase, CompletionStatus
from reserves.models.event import EventAssignment
from reserves.models.training import TrainingAssignment
from reserves.models.equipment import EquipmentAssignment
from reserves.models.policy import PolicyCompletion
from reserves.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

AssignmentType = TypeVar("AssignmentType", bound=AssignmentBase)


class AssignmentRepository(BaseRepository[AssignmentType]):
    """Repository for one assignment table."""

    def __init__(self, model: Type[AssignmentType], db: AsyncSession):
        super().__init__(model, db)
        self.entity_column = getattr(model, model.entity_key)

    def _pair(self, entity_id: UUID, user_id: UUID):
        return (self.entity_column == entity_id) & (self.model.user_id == user_id)

    # =================
    # Reads
    # =================
    async def get_for_entity(self, entity_id: UUID) -> List[AssignmentType]:
        """All assignments for one entity. An empty list is a valid answer."""
        stmt = (
            select(self.model)
            .options(selectinload(self.model.user))
            .where(self.entity_column == entity_id)
            .order_by(self.model.created_at)
        )
        async with self.guard("get_for_entity"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def get_for_user(self, user_id: UUID) -> List[AssignmentType]:
        """All assignments of one user for this entity type."""
        stmt = (
            select(self.model)
            .where(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc())
        )
        async with self.guard("get_for_user"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def get(self, entity_id: UUID, user_id: UUID) -> Optional[AssignmentType]:
        async with self.guard("get"):
            result = await self.db.execute(
                select(self.model).where(self._pair(entity_id, user_id))
            )
            return result.scalar_one_or_none()

    async def get_required(self, entity_id: UUID, user_id: UUID) -> AssignmentType:
        assignment = await self.get(entity_id, user_id)
        if assignment is None:
            raise NotFoundError(
                f"No {self.model.__name__} for {self.model.entity_key}={entity_id} user_id={user_id}"
            )
        return assignment

    # =================
    # Writes
    # =================
    async def create_assignment(
        self,
        entity_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        **fields: Any,
    ) -> AssignmentType:
        """
        Insert one assignment row.

        Raises:
            ValidationError: entity_id or user_id missing
            ConflictError: the (entity_id, user_id) pair already exists
        """
        if entity_id is None or user_id is None:
            raise ValidationError(
                f"{self.model.__name__} requires both {self.model.entity_key} and user_id"
            )

        fields.setdefault("completion_status", CompletionStatus.PENDING)
        assignment = await self.create(
            **{self.model.entity_key: entity_id},
            user_id=user_id,
            **fields,
        )
        logger.info(
            f"Created {self.model.__name__} {self.model.entity_key}={entity_id} user_id={user_id}"
        )
        return assignment

    async def recreate_assignment(
        self,
        entity_id: UUID,
        user_id: UUID,
        **fields: Any,
    ) -> AssignmentType:
        """
        Insert a fresh PENDING row, replacing a terminal row for the pair.

        The old row is removed and the new one inserted in one commit.

        Raises:
            ConflictError: the existing row for the pair is still open
        """
        existing = await self.get(entity_id, user_id)
        if existing is not None:
            if not existing.is_terminal:
                status = existing.completion_status.value
                await self.db.rollback()
                raise ConflictError(
                    f"{self.model.__name__} for {self.model.entity_key}={entity_id} "
                    f"user_id={user_id} is still {status}"
                )
            async with self.guard("recreate_assignment"):
                await self.db.delete(existing)
                await self.db.flush()
            logger.info(
                f"Replacing {existing.completion_status.value} {self.model.__name__} "
                f"{self.model.entity_key}={entity_id} user_id={user_id}"
            )
        return await self.create_assignment(entity_id=entity_id, user_id=user_id, **fields)

    async def update_open(self, entity_id: UUID, user_id: UUID, **fields: Any) -> AssignmentType:
        """
        Change fields of a PENDING assignment without moving its status.

        Raises:
            NotFoundError: no such assignment
            InvalidTransitionError: the assignment is already terminal
        """
        assignment = await self.get_required(entity_id, user_id)
        if assignment.is_terminal:
            raise InvalidTransitionError(
                f"{self.model.__name__} is already {assignment.completion_status.value}"
            )

        for key, value in fields.items():
            setattr(assignment, key, value)

        async with self.guard("update_open"):
            await self.db.commit()
            await self.db.refresh(assignment)
        return assignment

    async def delete_assignment(self, entity_id: UUID, user_id: UUID) -> AssignmentType:
        """
        Remove the row for (entity_id, user_id) and return it.

        Raises:
            NotFoundError: no such row; nothing is changed
        """
        assignment = await self.get_required(entity_id, user_id)
        async with self.guard("delete_assignment"):
            await self.db.delete(assignment)
            await self.db.commit()
        logger.info(
            f"Deleted {self.model.__name__} {self.model.entity_key}={entity_id} user_id={user_id}"
        )
        return assignment

    async def delete_all_for_entity(self, entity_id: UUID) -> int:
        """Remove every assignment for an entity. Returns the number removed."""
        async with self.guard("delete_all_for_entity"):
            result = await self.db.execute(
                delete(self.model).where(self.entity_column == entity_id)
            )
            await self.db.commit()
        return result.rowcount or 0

    async def update_status(
        self,
        entity_id: UUID,
        user_id: UUID,
        status: Union[CompletionStatus, str],
        notes: Optional[str] = None,
        **extra: Any,
    ) -> AssignmentType:
        """
        Move an assignment out of PENDING.

        Only PENDING -> one of model.allowed_statuses is accepted;
        COMPLETED and EXCUSED are terminal.

        Raises:
            NotFoundError: no such assignment
            InvalidTransitionError: the transition is not allowed
        """
        try:
            target = CompletionStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown completion status: {status!r}")

        assignment = await self.get_required(entity_id, user_id)

        if assignment.is_terminal:
            raise InvalidTransitionError(
                f"{self.model.__name__} is already {assignment.completion_status.value}"
            )
        if target not in self.model.allowed_statuses:
            raise InvalidTransitionError(
                f"{self.model.__name__} cannot move from pending to {target.value}"
            )

        assignment.completion_status = target
        if notes is not None:
            assignment.completion_notes = notes
        for key, value in extra.items():
            setattr(assignment, key, value)

        async with self.guard("update_status"):
            await self.db.commit()
            await self.db.refresh(assignment)

        logger.info(
            f"{self.model.__name__} {self.model.entity_key}={entity_id} "
            f"user_id={user_id} -> {target.value}"
        )
        return assignment


class EventAssignmentRepository(AssignmentRepository[EventAssignment]):
    def __init__(self, db: AsyncSession):
        super().__init__(EventAssignment, db)


class TrainingAssignmentRepository(AssignmentRepository[TrainingAssignment]):
    def __init__(self, db: AsyncSession):
        super().__init__(TrainingAssignment, db)


class EquipmentAssignmentRepository(AssignmentRepository[EquipmentAssignment]):
    def __init__(self, db: AsyncSession):
        super().__init__(EquipmentAssignment, db)


class PolicyCompletionRepository(AssignmentRepository[PolicyCompletion]):
    def __init__(self, db: AsyncSession):
        super().__init__(PolicyCompletion, db)
