"""
Application Repository

Data access layer for membership applications.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reserves.models.application import Application, ApplicationStatus
from reserves.repositories.base import BaseRepository


class ApplicationRepository(BaseRepository[Application]):
    """Repository for Application model."""

    def __init__(self, db: AsyncSession):
        super().__init__(Application, db)

    async def list_applications(
        self,
        status: Optional[ApplicationStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Application]:
        stmt = select(Application)
        if status is not None:
            stmt = stmt.where(Application.status == status)
        stmt = stmt.order_by(Application.created_at.desc()).offset(skip).limit(limit)
        async with self.guard("list_applications"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def get_for_user(self, user_id: UUID) -> List[Application]:
        async with self.guard("get_for_user"):
            result = await self.db.execute(
                select(Application)
                .where(Application.user_id == user_id)
                .order_by(Application.created_at.desc())
            )
            return list(result.scalars().all())
