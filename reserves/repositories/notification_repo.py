"""
Notification Repository

Data access layer for Notification model.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Set, Tuple
from uuid import UUID

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from reserves.core.exceptions import ConflictError, NotFoundError
from reserves.models.notification import Notification
from reserves.repositories.base import BaseRepository

# (entity_id, user_id, reminder_kind, occurrence_at)
ReminderKey = Tuple[UUID, UUID, str, datetime]


class NotificationRepository(BaseRepository[Notification]):
    """Repository for Notification model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Notification, db)

    async def list_for_user(
        self,
        user_id: UUID,
        is_read: Optional[bool] = None,
        notification_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Notification]:
        """Newest first, optionally filtered by read flag and type."""
        stmt = select(Notification).where(Notification.user_id == user_id)
        if is_read is not None:
            stmt = stmt.where(Notification.is_read == is_read)
        if notification_type is not None:
            stmt = stmt.where(Notification.type == notification_type)
        stmt = (
            stmt.order_by(Notification.created_at.desc(), Notification.id)
            .offset(skip)
            .limit(limit)
        )
        async with self.guard("list_for_user"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def unread_count(self, user_id: UUID) -> int:
        async with self.guard("unread_count"):
            result = await self.db.execute(
                select(func.count(Notification.id)).where(
                    Notification.user_id == user_id,
                    Notification.is_read.is_(False),
                )
            )
            return result.scalar() or 0

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        """Mark one of the user's notifications as read."""
        notification = await self.get_by_id(notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError("Notification not found")

        notification.is_read = True
        async with self.guard("mark_read"):
            await self.db.commit()
            await self.db.refresh(notification)
        return notification

    async def delete_for_user(self, notification_id: UUID, user_id: UUID) -> Notification:
        """Delete one of the user's notifications. Other users' rows read as missing."""
        notification = await self.get_by_id(notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError("Notification not found")

        async with self.guard("delete_for_user"):
            await self.db.delete(notification)
            await self.db.commit()
        return notification

    async def mark_all_read(self, user_id: UUID) -> int:
        async with self.guard("mark_all_read"):
            result = await self.db.execute(
                update(Notification)
                .where(
                    Notification.user_id == user_id,
                    Notification.is_read.is_(False),
                )
                .values(is_read=True)
            )
            await self.db.commit()
        return result.rowcount or 0

    async def get_reminder_keys(
        self,
        reminder_kind: str,
        entity_ids: Iterable[UUID],
    ) -> Set[ReminderKey]:
        """
        Dedup keys already recorded for the given reminder kind and entities.

        Occurrence timestamps are returned exactly as stored; callers
        normalize them before comparing.
        """
        entity_ids = list(set(entity_ids))
        if not entity_ids:
            return set()

        stmt = select(
            Notification.reminder_entity_id,
            Notification.user_id,
            Notification.reminder_kind,
            Notification.reminder_occurrence_at,
        ).where(
            Notification.reminder_kind == reminder_kind,
            Notification.reminder_entity_id.in_(entity_ids),
        )
        async with self.guard("get_reminder_keys"):
            result = await self.db.execute(stmt)
            return {tuple(row) for row in result.all()}

    async def create_reminder(self, **fields) -> Optional[Notification]:
        """
        Insert a reminder notification.

        Returns None when the unique reminder key already exists, which
        happens when an overlapping run recorded the same reminder first.
        """
        try:
            return await self.create(**fields)
        except ConflictError:
            return None
