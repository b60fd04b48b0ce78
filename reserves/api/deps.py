from fastapi import HTTPException, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import uuid
from typing import Optional
import logging

from reserves.core.config import Settings
from reserves.db.database import get_db
from reserves.models import User
from reserves.core.security import verify_access_token
from reserves.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_config(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.config


# =====================================================
# Get Current user
# =====================================================
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_config),
) -> User:
    """
    Dependency that validates the JWT and returns the user it names.

    Raises:
        HTTPException 401: If token is invalid or the user does not exist
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    subject = verify_access_token(credentials.credentials, config)
    if subject is None:
        raise _unauthorized("Invalid or expired token")

    try:
        user_id = uuid.UUID(subject)
    except ValueError:
        raise _unauthorized("Invalid token subject")

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        logger.warning(f"Token for unknown user {user_id}")
        raise _unauthorized("User not found")
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Dependency that ensures user is active.

    Builds on get_current_user, adds active check.
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )
    return current_user


# =====================================================
# Role checks
# =====================================================
async def require_admin(
    current_user: User = Depends(get_current_active_user)
) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user
