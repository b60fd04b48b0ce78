"""
Application Endpoints

Membership applications.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from reserves.db.database import get_db
from reserves.api.deps import get_current_active_user, require_admin
from reserves.models.application import ApplicationStatus
from reserves.models.user import User
from reserves.schemas.application import ApplicationCreate, ApplicationResponse
from reserves.services.application_service import ApplicationService

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post(
    "",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "A pending application already exists"}},
)
async def submit_application(
    application_data: ApplicationCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    return await ApplicationService(db).submit_application(
        current_user, **application_data.model_dump()
    )


@router.get("", response_model=List[ApplicationResponse])
async def list_applications(
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ApplicationService(db).list_applications(status=status_filter, skip=skip, limit=limit)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ApplicationService(db).get_application(application_id)


@router.post(
    "/{application_id}/approve",
    response_model=ApplicationResponse,
    responses={422: {"description": "Application is not pending"}},
)
async def approve_application(
    application_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ApplicationService(db).approve_application(application_id)


@router.post(
    "/{application_id}/reject",
    response_model=ApplicationResponse,
    responses={422: {"description": "Application is not pending"}},
)
async def reject_application(
    application_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ApplicationService(db).reject_application(application_id)


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_application(
    application_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Remove an application, its resume text included, in any status."""
    await ApplicationService(db).delete_application(application_id)
    return None
