"""
Notification Service

Creates in-app notifications from templates and serves the
notification list of a user. Delivery beyond the stored row
(push, email) is not handled here.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from reserves.core.exceptions import ReservesError
from reserves.models.notification import Notification
from reserves.models.user import User
from reserves.repositories.notification_repo import NotificationRepository
from reserves.repositories.user_repo import UserRepository
from reserves.services.notification_templates import (
    NotificationType,
    deduplicate_recipients,
    render_notification,
)

logger = logging.getLogger(__name__)

Recipient = Union[User, UUID, Mapping[str, Any]]


def _as_recipient(recipient: Recipient):
    """Bare ids are wrapped so the deduplicator can read an ``id``."""
    if isinstance(recipient, UUID):
        return {"id": recipient}
    return recipient


def _recipient_id(recipient) -> UUID:
    if isinstance(recipient, Mapping):
        return recipient["id"]
    return recipient.id


class NotificationService:
    """Service class for notification operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notification_repo = NotificationRepository(db)
        self.user_repo = UserRepository(db)

    # ============================================================
    # Create
    # ============================================================
    async def create_notification(
        self,
        user_id: UUID,
        notification_type: Union[NotificationType, str],
        template_data: Optional[Mapping[str, Any]] = None,
        url: Optional[str] = None,
    ) -> Notification:
        """Render the template for ``notification_type`` and store it for one user."""
        notification_type = NotificationType(notification_type)
        return await self.notification_repo.create(
            user_id=user_id,
            type=notification_type.value,
            message=render_notification(notification_type, template_data),
            url=url,
            is_read=False,
        )

    async def notify_users(
        self,
        recipients: Iterable[Recipient],
        notification_type: Union[NotificationType, str],
        template_data: Optional[Mapping[str, Any]] = None,
        url: Optional[str] = None,
    ) -> List[Notification]:
        """
        Send the same notification to many users.

        Duplicate recipients receive a single notification.
        """
        notification_type = NotificationType(notification_type)
        unique = deduplicate_recipients(_as_recipient(r) for r in recipients)
        if not unique:
            logger.warning(f"No recipients for {notification_type.value} notification")
            return []

        message = render_notification(notification_type, template_data)
        notifications = [
            Notification(
                user_id=_recipient_id(recipient),
                type=notification_type.value,
                message=message,
                url=url,
                is_read=False,
            )
            for recipient in unique
        ]

        async with self.notification_repo.guard("notify_users"):
            self.db.add_all(notifications)
            await self.db.commit()

        logger.info(
            f"Created {len(notifications)} {notification_type.value} notification(s)"
        )
        return notifications

    async def notify_admins(
        self,
        notification_type: Union[NotificationType, str],
        template_data: Optional[Mapping[str, Any]] = None,
        url: Optional[str] = None,
    ) -> List[Notification]:
        admins = await self.user_repo.get_admins()
        return await self.notify_users(admins, notification_type, template_data, url)

    async def notify_reserves(
        self,
        notification_type: Union[NotificationType, str],
        template_data: Optional[Mapping[str, Any]] = None,
        url: Optional[str] = None,
    ) -> List[Notification]:
        reserves = await self.user_repo.get_reserves()
        return await self.notify_users(reserves, notification_type, template_data, url)

    async def try_notify(self, coro) -> None:
        """
        Await a notification coroutine, logging instead of raising on failure.

        Used for side-effect notifications so the primary action still succeeds.
        """
        try:
            await coro
        except ReservesError as e:
            logger.warning(f"Failed to save notification to DB: {e}")

    # ============================================================
    # Read / update
    # ============================================================
    async def list_for_user(
        self,
        user_id: UUID,
        is_read: Optional[bool] = None,
        notification_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[Notification]:
        return await self.notification_repo.list_for_user(
            user_id,
            is_read=is_read,
            notification_type=notification_type,
            skip=skip,
            limit=limit,
        )

    async def unread_count(self, user_id: UUID) -> int:
        return await self.notification_repo.unread_count(user_id)

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        return await self.notification_repo.mark_read(notification_id, user_id)

    async def mark_all_read(self, user_id: UUID) -> int:
        return await self.notification_repo.mark_all_read(user_id)

    async def delete_notification(self, notification_id: UUID, user_id: UUID) -> Notification:
        return await self.notification_repo.delete_for_user(notification_id, user_id)
