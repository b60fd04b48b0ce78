from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from reserves.models.equipment import EquipmentCondition


class EquipmentBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    serial_number: Optional[str] = Field(None, max_length=100)
    purchase_date: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=5000)


class EquipmentCreate(EquipmentBase):
    class Config:
        json_schema_extra = {
            "example": {
                "name": "Radio #12",
                "serial_number": "MTR-2040-0012",
                "description": "Handheld radio",
            }
        }


class EquipmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    serial_number: Optional[str] = Field(None, max_length=100)
    purchase_date: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=5000)


class EquipmentResponse(EquipmentBase):
    id: UUID
    is_assigned: bool
    assigned_to: Optional[UUID] = None
    is_obsolete: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ============================================================
# Check-out / return
# ============================================================

class EquipmentAssignRequest(BaseModel):
    user_id: UUID = Field(..., description="User receiving the equipment")
    condition: EquipmentCondition = Field(EquipmentCondition.GOOD, description="Condition at check-out")
    expected_return_at: Optional[datetime] = Field(
        None, description="When the equipment is due back; drives return reminders"
    )
    notes: Optional[str] = Field(None, max_length=2000)


class EquipmentReturnRequest(BaseModel):
    user_id: UUID
    condition: EquipmentCondition = Field(..., description="Condition at return")
    notes: Optional[str] = Field(None, max_length=2000)


class EquipmentAssignmentUpdate(BaseModel):
    user_id: UUID
    expected_return_at: Optional[datetime] = Field(
        None, description="New due date; a moved date is reminded about again"
    )
    condition: Optional[EquipmentCondition] = None
    notes: Optional[str] = Field(None, max_length=2000)
