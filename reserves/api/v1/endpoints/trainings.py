"""
Training Endpoints

HTTP API for training sessions and training signups.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from reserves.db.database import get_db
from reserves.api.deps import get_current_active_user, require_admin
from reserves.models.user import User
from reserves.schemas.training import TrainingCreate, TrainingUpdate, TrainingResponse
from reserves.schemas.assignment import (
    ParticipantResponse,
    StatusUpdateRequest,
    TrainingAssignmentResponse,
)
from reserves.services.assignment_service import AssignmentService
from reserves.services.entity_service import TrainingService

router = APIRouter(prefix="/trainings", tags=["Training"])


# ============================================================
# Training CRUD
# ============================================================
@router.get("", response_model=List[TrainingResponse])
async def list_trainings(
    starts_after: Optional[datetime] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await TrainingService(db).list(starts_after=starts_after, skip=skip, limit=limit)


@router.post("", response_model=TrainingResponse, status_code=status.HTTP_201_CREATED)
async def create_training(
    training_data: TrainingCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await TrainingService(db).create(**training_data.model_dump())


@router.get("/{training_id}", response_model=TrainingResponse)
async def get_training(
    training_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await TrainingService(db).get(training_id)


@router.patch("/{training_id}", response_model=TrainingResponse)
async def update_training(
    training_id: UUID,
    training_data: TrainingUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await TrainingService(db).update(
        training_id, **training_data.model_dump(exclude_unset=True)
    )


@router.delete("/{training_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_training(
    training_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await TrainingService(db).delete(training_id)
    return None


# ============================================================
# Signups
# ============================================================
@router.post(
    "/{training_id}/signup",
    response_model=TrainingAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Already signed up"}},
)
async def sign_up(
    training_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentService(db).sign_up_for_training(training_id, current_user)


@router.delete("/{training_id}/signup", status_code=status.HTTP_204_NO_CONTENT)
async def leave(
    training_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    await AssignmentService(db).leave_training(training_id, current_user)
    return None


@router.get("/{training_id}/participants", response_model=List[ParticipantResponse])
async def list_participants(
    training_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentService(db).get_training_participants(training_id)


@router.post("/{training_id}/status", response_model=TrainingAssignmentResponse)
async def set_status(
    training_id: UUID,
    payload: StatusUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentService(db).set_training_status(
        training_id, payload.user_id, payload.status, payload.notes
    )
