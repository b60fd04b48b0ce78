"""
Equipment Endpoints

HTTP API for the equipment inventory, check-out and return.
All routes are admin-only except listing a user's own equipment
through /me/assignments.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from reserves.db.database import get_db
from reserves.api.deps import require_admin
from reserves.models.user import User
from reserves.schemas.equipment import (
    EquipmentAssignmentUpdate,
    EquipmentAssignRequest,
    EquipmentCreate,
    EquipmentResponse,
    EquipmentReturnRequest,
    EquipmentUpdate,
)
from reserves.schemas.assignment import EquipmentAssignmentResponse
from reserves.services.assignment_service import AssignmentService
from reserves.services.entity_service import EquipmentService

router = APIRouter(prefix="/equipment", tags=["Equipment"])


# ============================================================
# Inventory
# ============================================================
@router.get("", response_model=List[EquipmentResponse])
async def list_equipment(
    available_only: bool = Query(False, description="Only equipment that can be checked out"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EquipmentService(db).list(available_only=available_only, skip=skip, limit=limit)


@router.post("", response_model=EquipmentResponse, status_code=status.HTTP_201_CREATED)
async def create_equipment(
    equipment_data: EquipmentCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EquipmentService(db).create(**equipment_data.model_dump())


@router.get("/{equipment_id}", response_model=EquipmentResponse)
async def get_equipment(
    equipment_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EquipmentService(db).get(equipment_id)


@router.patch("/{equipment_id}", response_model=EquipmentResponse)
async def update_equipment(
    equipment_id: UUID,
    equipment_data: EquipmentUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EquipmentService(db).update(
        equipment_id, **equipment_data.model_dump(exclude_unset=True)
    )


@router.post(
    "/{equipment_id}/obsolete",
    response_model=EquipmentResponse,
    responses={422: {"description": "Equipment is still assigned"}},
)
async def mark_obsolete(
    equipment_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EquipmentService(db).mark_obsolete(equipment_id)


# ============================================================
# Check-out / return
# ============================================================
@router.post(
    "/{equipment_id}/assign",
    response_model=EquipmentAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Equipment or user not found"},
        409: {"description": "Equipment already assigned"},
        422: {"description": "Equipment is obsolete"},
    }
)
async def assign_equipment(
    equipment_id: UUID,
    payload: EquipmentAssignRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Check equipment out to a user; the user is notified."""
    return await AssignmentService(db).assign_equipment(
        equipment_id,
        payload.user_id,
        condition=payload.condition,
        expected_return_at=payload.expected_return_at,
        notes=payload.notes,
    )


@router.patch(
    "/{equipment_id}/assignment",
    response_model=EquipmentAssignmentResponse,
    responses={
        404: {"description": "Assignment not found"},
        422: {"description": "Already returned"},
    }
)
async def update_equipment_assignment(
    equipment_id: UUID,
    payload: EquipmentAssignmentUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Change the due date, condition or notes of an open checkout."""
    return await AssignmentService(db).update_equipment_assignment(
        equipment_id,
        payload.user_id,
        expected_return_at=payload.expected_return_at,
        condition=payload.condition,
        notes=payload.notes,
    )


@router.post(
    "/{equipment_id}/return",
    response_model=EquipmentAssignmentResponse,
    responses={
        404: {"description": "Assignment not found"},
        422: {"description": "Already returned"},
    }
)
async def return_equipment(
    equipment_id: UUID,
    payload: EquipmentReturnRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentService(db).return_equipment(
        equipment_id, payload.user_id, payload.condition, payload.notes
    )


@router.get("/{equipment_id}/history", response_model=List[EquipmentAssignmentResponse])
async def equipment_history(
    equipment_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentService(db).get_equipment_history(equipment_id)
