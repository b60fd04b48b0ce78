"""
User Service

Admin management of user accounts: listing, editing profile fields,
role and position, and deactivation. Users are never deleted.
"""

import logging
from typing import Any, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from reserves.core.exceptions import ConflictError, ValidationError
from reserves.models.user import User
from reserves.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"email", "first_name", "last_name", "phone", "role", "position"}
# phone is the only optional column
REQUIRED_FIELDS = EDITABLE_FIELDS - {"phone"}


class UserService:
    """Service class for user administration."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    async def list_users(self, skip: int = 0, limit: int = 100) -> List[User]:
        return await self.user_repo.get_all_users(skip=skip, limit=limit)

    async def get_user(self, user_id: UUID) -> User:
        return await self.user_repo.get_or_404(user_id)

    async def update_user(self, user_id: UUID, **fields: Any) -> User:
        """
        Change profile fields, role or position of a user.

        Raises:
            NotFoundError: user does not exist
            ValidationError: a field that cannot be edited, or a required one
                set to None
            ConflictError: the new email belongs to another user
        """
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit user fields: {', '.join(sorted(unknown))}")
        cleared = sorted(k for k in REQUIRED_FIELDS & set(fields) if fields[k] is None)
        if cleared:
            raise ValidationError(f"User fields cannot be empty: {', '.join(cleared)}")

        user = await self.user_repo.get_or_404(user_id)

        email = fields.get("email")
        if email is not None and email != user.email:
            owner = await self.user_repo.get_by_email(email)
            if owner is not None:
                raise ConflictError(f"Email {email} is already in use")

        user = await self.user_repo.update_user(user.id, **fields)
        logger.info(f"Updated user {user.id}: {sorted(fields)}")
        return user

    async def deactivate(self, user_id: UUID, acting_user: User) -> User:
        """
        Deactivate a user. Their history is kept and they can no longer
        use the API or receive reminders.

        Raises:
            NotFoundError: user does not exist
            ValidationError: an admin tried to deactivate themselves
        """
        if user_id == acting_user.id:
            raise ValidationError("You cannot deactivate your own account")

        user = await self.user_repo.deactivate(user_id)
        logger.info(f"User {user.id} deactivated by {acting_user.id}")
        return user
