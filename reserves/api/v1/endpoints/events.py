"""
Event Endpoints

HTTP API for events and event signups.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from reserves.db.database import get_db
from reserves.api.deps import get_current_active_user, require_admin
from reserves.models.user import User
from reserves.schemas.event import EventCreate, EventUpdate, EventResponse
from reserves.schemas.assignment import (
    EventAssignmentResponse,
    ParticipantResponse,
    StatusUpdateRequest,
)
from reserves.services.assignment_service import AssignmentService
from reserves.services.entity_service import EventService

# ============================================================
# Router Setup
# ============================================================
router = APIRouter(prefix="/events", tags=["Events"])


# ============================================================
# Event CRUD
# ============================================================
@router.get("", response_model=List[EventResponse])
async def list_events(
    starts_after: Optional[datetime] = Query(None, description="Only events starting at or after this time"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await EventService(db).list(starts_after=starts_after, skip=skip, limit=limit)


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Event created; reserves are notified"},
        403: {"description": "Admin access required"},
    }
)
async def create_event(
    event_data: EventCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EventService(db).create(**event_data.model_dump())


@router.get(
    "/{event_id}",
    response_model=EventResponse,
    responses={404: {"description": "Event not found"}},
)
async def get_event(
    event_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await EventService(db).get(event_id)


@router.patch(
    "/{event_id}",
    response_model=EventResponse,
    responses={404: {"description": "Event not found"}},
)
async def update_event(
    event_id: UUID,
    event_data: EventUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await EventService(db).update(event_id, **event_data.model_dump(exclude_unset=True))


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete an event together with its signups."""
    await EventService(db).delete(event_id)
    return None


# ============================================================
# Signups
# ============================================================
@router.post(
    "/{event_id}/signup",
    response_model=EventAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Event not found"},
        409: {"description": "Already signed up"},
    }
)
async def sign_up(
    event_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentService(db).sign_up_for_event(event_id, current_user)


@router.delete(
    "/{event_id}/signup",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Not signed up"}},
)
async def leave(
    event_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    await AssignmentService(db).leave_event(event_id, current_user)
    return None


@router.get("/{event_id}/participants", response_model=List[ParticipantResponse])
async def list_participants(
    event_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentService(db).get_event_participants(event_id)


@router.post(
    "/{event_id}/status",
    response_model=EventAssignmentResponse,
    responses={
        404: {"description": "Assignment not found"},
        422: {"description": "Status change not allowed"},
    }
)
async def set_status(
    event_id: UUID,
    payload: StatusUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Mark a participant as completed or excused."""
    return await AssignmentService(db).set_event_status(
        event_id, payload.user_id, payload.status, payload.notes
    )
