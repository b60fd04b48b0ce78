from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from reserves.models.assignment import CompletionStatus
from reserves.models.equipment import EquipmentCondition
from reserves.schemas.common import UserSummary


# ============================================================
# Request Schemas
# ============================================================

class StatusUpdateRequest(BaseModel):
    """Admin moves a user's assignment out of pending."""

    user_id: UUID
    status: CompletionStatus = Field(..., description="completed or excused")
    notes: Optional[str] = Field(None, max_length=2000)


# ============================================================
# Response Schemas
# ============================================================

class AssignmentResponse(BaseModel):
    id: UUID
    user_id: UUID
    completion_status: CompletionStatus
    completion_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EventAssignmentResponse(AssignmentResponse):
    event_id: UUID


class TrainingAssignmentResponse(AssignmentResponse):
    training_id: UUID


class EquipmentAssignmentResponse(AssignmentResponse):
    equipment_id: UUID
    condition: EquipmentCondition
    checked_out_at: datetime
    checked_in_at: Optional[datetime] = None
    expected_return_at: Optional[datetime] = None


class PolicyCompletionResponse(AssignmentResponse):
    policy_id: UUID
    acknowledged_at: Optional[datetime] = None


class ParticipantResponse(AssignmentResponse):
    """Assignment row with the user embedded, for participant lists."""

    user: UserSummary


class UserAssignmentsResponse(BaseModel):
    events: List[EventAssignmentResponse]
    training: List[TrainingAssignmentResponse]
    equipment: List[EquipmentAssignmentResponse]
    policies: List[PolicyCompletionResponse]
