"""
User Repository

Data access layer for User model.
All user-related database operations.
"""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from reserves.repositories.base import BaseRepository
from reserves.models.user import User, UserPosition, UserRole


class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    # =================
    # Get by email
    # =================
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email address."""
        async with self.guard("get_by_email"):
            result = await self.db.execute(
                select(User).where(User.email == email)
            )
            return result.scalar_one_or_none()

    # =================
    # Get all users
    # =================
    async def get_all_users(self, skip: int = 0, limit: int = 100) -> List[User]:
        """Get all users ordered by creation date."""
        async with self.guard("get_all_users"):
            result = await self.db.execute(
                select(User)
                .order_by(User.created_at.desc())
                .offset(skip)
                .limit(limit)
            )
            return list(result.scalars().all())

    # =================
    # Fan-out audiences
    # =================
    async def get_admins(self) -> List[User]:
        """Active users with the admin role."""
        async with self.guard("get_admins"):
            result = await self.db.execute(
                select(User).where(User.role == UserRole.ADMIN, User.is_active.is_(True))
            )
            return list(result.scalars().all())

    async def get_reserves(self) -> List[User]:
        """Active users holding a reserve position."""
        async with self.guard("get_reserves"):
            result = await self.db.execute(
                select(User).where(User.position == UserPosition.RESERVE, User.is_active.is_(True))
            )
            return list(result.scalars().all())

    # =================
    # Update user
    # =================
    async def update_user(self, user_id, **kwargs) -> User:
        """Update user fields."""
        return await self.update(user_id, **kwargs)

    async def deactivate(self, user_id) -> User:
        """Users are never deleted, only deactivated."""
        return await self.update(user_id, is_active=False)
