"""
Application Service

Membership applications: a guest submits one, an admin approves or
rejects it. Approval promotes the guest to member.
"""

import logging
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from reserves.core.exceptions import ConflictError, InvalidTransitionError
from reserves.models.application import Application, ApplicationStatus
from reserves.models.user import User, UserRole
from reserves.repositories.application_repo import ApplicationRepository
from reserves.repositories.user_repo import UserRepository
from reserves.services.notification_service import NotificationService
from reserves.services.notification_templates import NotificationType

logger = logging.getLogger(__name__)


class ApplicationService:
    """Service class for membership applications."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.application_repo = ApplicationRepository(db)
        self.user_repo = UserRepository(db)
        self.notifications = NotificationService(db)

    async def submit_application(self, user: User, **fields: Any) -> Application:
        """
        Store a new application for ``user`` and tell the admins.

        Raises:
            ConflictError: the user already has a pending application
        """
        existing = await self.application_repo.get_for_user(user.id)
        if any(a.status == ApplicationStatus.PENDING for a in existing):
            raise ConflictError("You already have a pending application")

        application = await self.application_repo.create(
            user_id=user.id,
            status=ApplicationStatus.PENDING,
            **fields,
        )
        logger.info(f"Application {application.id} submitted by {user.id}")

        await self.notifications.try_notify(
            self.notifications.notify_admins(
                NotificationType.APPLICATION_SUBMITTED,
                {"userName": f"{application.first_name} {application.last_name}"},
                url=f"/admin/applications/{application.id}",
            )
        )
        return application

    async def list_applications(
        self,
        status: Optional[ApplicationStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Application]:
        return await self.application_repo.list_applications(status=status, skip=skip, limit=limit)

    async def get_application(self, application_id: UUID) -> Application:
        return await self.application_repo.get_or_404(application_id)

    async def approve_application(self, application_id: UUID) -> Application:
        """
        Approve a pending application.

        The applicant becomes a member (admins keep their role) and takes
        the position they applied for.
        """
        application = await self._get_pending(application_id)
        user = await self.user_repo.get_or_404(application.user_id)

        application.status = ApplicationStatus.APPROVED
        if user.role == UserRole.GUEST:
            user.role = UserRole.MEMBER
        user.position = application.position

        async with self.application_repo.guard("approve_application"):
            await self.db.commit()
            await self.db.refresh(application)

        logger.info(f"Application {application.id} approved")
        await self.notifications.try_notify(
            self.notifications.create_notification(
                application.user_id, NotificationType.APPLICATION_APPROVED
            )
        )
        return application

    async def reject_application(self, application_id: UUID) -> Application:
        application = await self._get_pending(application_id)
        application = await self.application_repo.update(
            application.id, status=ApplicationStatus.REJECTED
        )

        logger.info(f"Application {application.id} rejected")
        await self.notifications.try_notify(
            self.notifications.create_notification(
                application.user_id, NotificationType.APPLICATION_REJECTED
            )
        )
        return application

    async def delete_application(self, application_id: UUID) -> Application:
        application = await self.application_repo.delete(application_id)
        logger.info(f"Application {application.id} deleted")
        return application

    async def _get_pending(self, application_id: UUID) -> Application:
        application = await self.application_repo.get_or_404(application_id)
        if application.status != ApplicationStatus.PENDING:
            raise InvalidTransitionError(
                f"Application is already {application.status.value}"
            )
        return application
