"""
User Endpoints

Current user:
- GET  /me                      - the authenticated user
- GET  /me/assignments          - everything the current user is signed up for,
                                  holds, or has to acknowledge

Admin:
- GET  /users                   - list users, newest first
- GET  /users/{id}              - one user
- PATCH /users/{id}             - edit profile fields, role or position
- POST /users/{id}/deactivate   - deactivate (users are never deleted)
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from reserves.db.database import get_db
from reserves.api.deps import get_current_active_user, require_admin
from reserves.models.user import User
from reserves.schemas.assignment import UserAssignmentsResponse
from reserves.schemas.user import UserResponse, UserUpdate
from reserves.services.assignment_service import AssignmentService
from reserves.services.user_service import UserService

router = APIRouter(prefix="/me", tags=["Me"])
admin_router = APIRouter(prefix="/users", tags=["Users"])


# ============================================================
# Current user
# ============================================================
@router.get("", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_active_user)):
    return current_user


@router.get("/assignments", response_model=UserAssignmentsResponse)
async def my_assignments(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentService(db).get_user_assignments(current_user.id)


# ============================================================
# Admin
# ============================================================
@admin_router.get("", response_model=List[UserResponse])
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).list_users(skip=skip, limit=limit)


@admin_router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).get_user(user_id)


@admin_router.patch(
    "/{user_id}",
    response_model=UserResponse,
    responses={
        404: {"description": "User not found"},
        409: {"description": "Email already in use"},
    },
)
async def update_user(
    user_id: UUID,
    payload: UserUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).update_user(user_id, **payload.model_dump(exclude_unset=True))


@admin_router.post(
    "/{user_id}/deactivate",
    response_model=UserResponse,
    responses={
        404: {"description": "User not found"},
        422: {"description": "Cannot deactivate yourself"},
    },
)
async def deactivate_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).deactivate(user_id, admin)
