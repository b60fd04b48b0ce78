"""
Entity Repositories

Data access for the assignable entities: events, training sessions,
policies and equipment.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reserves.models.event import Event
from reserves.models.training import Training
from reserves.models.policy import Policy
from reserves.models.equipment import Equipment
from reserves.repositories.base import BaseRepository


class EventRepository(BaseRepository[Event]):
    """Repository for Event model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Event, db)

    async def list_events(
        self,
        starts_after: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Event]:
        """Events ordered by start time, optionally only upcoming ones."""
        stmt = select(Event)
        if starts_after is not None:
            stmt = stmt.where(Event.starts_at >= starts_after)
        stmt = stmt.order_by(Event.starts_at).offset(skip).limit(limit)
        async with self.guard("list_events"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())


class TrainingRepository(BaseRepository[Training]):
    """Repository for Training model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Training, db)

    async def list_trainings(
        self,
        starts_after: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Training]:
        stmt = select(Training)
        if starts_after is not None:
            stmt = stmt.where(Training.starts_at >= starts_after)
        stmt = stmt.order_by(Training.starts_at).offset(skip).limit(limit)
        async with self.guard("list_trainings"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())


class PolicyRepository(BaseRepository[Policy]):
    """Repository for Policy model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Policy, db)

    async def list_policies(self, active_only: bool = False) -> List[Policy]:
        stmt = select(Policy)
        if active_only:
            stmt = stmt.where(Policy.is_active.is_(True))
        stmt = stmt.order_by(Policy.policy_number)
        async with self.guard("list_policies"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())


class EquipmentRepository(BaseRepository[Equipment]):
    """Repository for Equipment model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Equipment, db)

    async def list_available(self) -> List[Equipment]:
        """Equipment that is neither assigned nor obsolete."""
        stmt = (
            select(Equipment)
            .where(Equipment.is_assigned.is_(False), Equipment.is_obsolete.is_(False))
            .order_by(Equipment.name)
        )
        async with self.guard("list_available"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
