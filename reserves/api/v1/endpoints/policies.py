"""
Policy Endpoints

HTTP API for policies and policy acknowledgement.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from reserves.db.database import get_db
from reserves.api.deps import get_current_active_user, require_admin
from reserves.models.user import User
from reserves.schemas.policy import (
    PolicyCreate,
    PolicyResetRequest,
    PolicyResetResponse,
    PolicyResponse,
    PolicyUpdate,
)
from reserves.schemas.assignment import (
    ParticipantResponse,
    PolicyCompletionResponse,
    StatusUpdateRequest,
)
from reserves.services.assignment_service import AssignmentService
from reserves.services.entity_service import PolicyService

router = APIRouter(prefix="/policies", tags=["Policies"])


# ============================================================
# Policy CRUD
# ============================================================
@router.get("", response_model=List[PolicyResponse])
async def list_policies(
    active_only: bool = Query(True),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await PolicyService(db).list(active_only=active_only)


@router.post(
    "",
    response_model=PolicyResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Policy number already exists"}},
)
async def create_policy(
    policy_data: PolicyCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await PolicyService(db).create(**policy_data.model_dump())


@router.get("/{policy_id}", response_model=PolicyResponse)
async def get_policy(
    policy_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await PolicyService(db).get(policy_id)


@router.patch("/{policy_id}", response_model=PolicyResponse)
async def update_policy(
    policy_id: UUID,
    policy_data: PolicyUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await PolicyService(db).update(policy_id, **policy_data.model_dump(exclude_unset=True))


@router.delete("/{policy_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_policy(
    policy_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await PolicyService(db).delete(policy_id)
    return None


# ============================================================
# Acknowledgement
# ============================================================
@router.post(
    "/{policy_id}/acknowledge",
    response_model=PolicyCompletionResponse,
    responses={
        404: {"description": "Policy not found"},
        422: {"description": "Policy inactive or already acknowledged"},
    }
)
async def acknowledge_policy(
    policy_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentService(db).acknowledge_policy(policy_id, current_user)


@router.get("/{policy_id}/completions", response_model=List[ParticipantResponse])
async def list_completions(
    policy_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentService(db).get_policy_completions(policy_id)


@router.post("/{policy_id}/status", response_model=PolicyCompletionResponse)
async def set_status(
    policy_id: UUID,
    payload: StatusUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentService(db).set_policy_status(
        policy_id, payload.user_id, payload.status, payload.notes
    )


@router.post("/{policy_id}/reset", response_model=PolicyResetResponse)
async def reset_completions(
    policy_id: UUID,
    payload: PolicyResetRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Require the policy to be acknowledged again."""
    count = await AssignmentService(db).reset_policy_completion(policy_id, payload.user_id)
    return {"policy_id": policy_id, "reset_count": count}


@router.post(
    "/{policy_id}/assign",
    response_model=List[PolicyCompletionResponse],
    status_code=status.HTTP_201_CREATED,
)
async def assign_to_reserves(
    policy_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Ask every active reserve who has not got this policy yet to acknowledge it."""
    return await AssignmentService(db).assign_policy_to_reserves(policy_id)
