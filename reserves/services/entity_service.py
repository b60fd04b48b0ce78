"""
Entity Services

CRUD for the assignable catalog: events, training sessions, policies
and equipment. New and changed events, trainings and policies are
announced to reserves.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from reserves.core.exceptions import ValidationError
from reserves.models.event import Event
from reserves.models.training import Training
from reserves.models.policy import Policy
from reserves.models.equipment import Equipment
from reserves.repositories.base import BaseRepository
from reserves.repositories.entity_repo import (
    EventRepository,
    TrainingRepository,
    PolicyRepository,
    EquipmentRepository,
)
from reserves.services.notification_service import NotificationService
from reserves.services.notification_templates import NotificationType
from reserves.utils.time_utils import as_utc

logger = logging.getLogger(__name__)

EntityType = TypeVar("EntityType")


def _check_schedule(starts_at: Optional[datetime], ends_at: Optional[datetime]) -> None:
    if starts_at is not None and ends_at is not None and as_utc(ends_at) < as_utc(starts_at):
        raise ValidationError("ends_at must not be before starts_at")


class _CatalogService(Generic[EntityType]):
    """
    Shared CRUD for one entity table.

    Subclasses set the repository and, when the entity is announced,
    the created/updated notification kinds and placeholder name.
    """

    created_type: Optional[NotificationType] = None
    updated_type: Optional[NotificationType] = None
    name_placeholder: str = ""
    url_prefix: str = ""

    def __init__(self, db: AsyncSession, repo: BaseRepository):
        self.db = db
        self.repo = repo
        self.notifications = NotificationService(db)

    async def get(self, entity_id: UUID) -> EntityType:
        return await self.repo.get_or_404(entity_id)

    async def create(self, **fields: Any) -> EntityType:
        self.validate(fields)
        entity = await self.repo.create(**fields)
        logger.info(f"Created {type(entity).__name__} {entity.id}")
        await self._announce(self.created_type, entity)
        return entity

    async def update(self, entity_id: UUID, **fields: Any) -> EntityType:
        current = await self.repo.get_or_404(entity_id)
        self.validate({**self._snapshot(current), **fields})
        entity = await self.repo.update(entity_id, **fields)
        logger.info(f"Updated {type(entity).__name__} {entity.id}")
        await self._announce(self.updated_type, entity)
        return entity

    async def delete(self, entity_id: UUID) -> EntityType:
        entity = await self.repo.delete(entity_id)
        logger.info(f"Deleted {type(entity).__name__} {entity_id}")
        return entity

    def validate(self, fields: Dict[str, Any]) -> None:
        pass

    def _snapshot(self, entity) -> Dict[str, Any]:
        return {}

    async def _announce(self, notification_type: Optional[NotificationType], entity) -> None:
        if notification_type is None:
            return
        await self.notifications.try_notify(
            self.notifications.notify_reserves(
                notification_type,
                {self.name_placeholder: entity.name},
                url=f"{self.url_prefix}/{entity.id}",
            )
        )


class EventService(_CatalogService[Event]):
    created_type = NotificationType.EVENT_CREATED
    updated_type = NotificationType.EVENT_UPDATED
    name_placeholder = "eventName"
    url_prefix = "/user/events"

    def __init__(self, db: AsyncSession):
        super().__init__(db, EventRepository(db))

    async def list(
        self,
        starts_after: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Event]:
        return await self.repo.list_events(starts_after=starts_after, skip=skip, limit=limit)

    def validate(self, fields: Dict[str, Any]) -> None:
        _check_schedule(fields.get("starts_at"), fields.get("ends_at"))

    def _snapshot(self, entity: Event) -> Dict[str, Any]:
        return {"starts_at": entity.starts_at, "ends_at": entity.ends_at}


class TrainingService(_CatalogService[Training]):
    created_type = NotificationType.TRAINING_CREATED
    updated_type = NotificationType.TRAINING_UPDATED
    name_placeholder = "trainingName"
    url_prefix = "/user/training"

    def __init__(self, db: AsyncSession):
        super().__init__(db, TrainingRepository(db))

    async def list(
        self,
        starts_after: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Training]:
        return await self.repo.list_trainings(starts_after=starts_after, skip=skip, limit=limit)

    def validate(self, fields: Dict[str, Any]) -> None:
        _check_schedule(fields.get("starts_at"), fields.get("ends_at"))

    def _snapshot(self, entity: Training) -> Dict[str, Any]:
        return {"starts_at": entity.starts_at, "ends_at": entity.ends_at}


class PolicyService(_CatalogService[Policy]):
    created_type = NotificationType.POLICY_CREATED
    updated_type = NotificationType.POLICY_UPDATED
    name_placeholder = "policyName"
    url_prefix = "/policies"

    def __init__(self, db: AsyncSession):
        super().__init__(db, PolicyRepository(db))

    async def list(self, active_only: bool = False) -> List[Policy]:
        return await self.repo.list_policies(active_only=active_only)


class EquipmentService(_CatalogService[Equipment]):
    """Equipment is tracked, not announced."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, EquipmentRepository(db))

    async def list(self, available_only: bool = False, skip: int = 0, limit: int = 100) -> List[Equipment]:
        if available_only:
            return await self.repo.list_available()
        return await self.repo.get_all(skip=skip, limit=limit, order_by=Equipment.name)

    async def mark_obsolete(self, equipment_id: UUID) -> Equipment:
        """Retire equipment. Checked-out equipment has to be returned first."""
        item = await self.repo.get_or_404(equipment_id)
        if item.is_assigned:
            raise ValidationError(f"Equipment {item.name} is still assigned")
        return await self.repo.update(equipment_id, is_obsolete=True)
