from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from reserves.utils.time_utils import as_utc


class TrainingBase(BaseModel):
    """Shared attributes for training creation and updates."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    location: str = Field(..., min_length=1, max_length=255)
    training_type: str = Field(..., min_length=1, max_length=100, description="e.g. firearms, first aid")
    instructor: str = Field(..., min_length=1, max_length=200)
    starts_at: datetime
    ends_at: datetime

    @model_validator(mode="after")
    def check_schedule(self):
        if as_utc(self.ends_at) < as_utc(self.starts_at):
            raise ValueError("ends_at must not be before starts_at")
        return self


class TrainingCreate(TrainingBase):
    class Config:
        json_schema_extra = {
            "example": {
                "name": "CPR Recertification",
                "training_type": "first_aid",
                "instructor": "Sgt. Alvarez",
                "location": "Training Room B",
                "starts_at": "2024-06-10T09:00:00Z",
                "ends_at": "2024-06-10T12:00:00Z",
            }
        }


class TrainingUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    training_type: Optional[str] = Field(None, min_length=1, max_length=100)
    instructor: Optional[str] = Field(None, min_length=1, max_length=200)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None


class TrainingResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    location: str
    training_type: str
    instructor: str
    starts_at: datetime
    ends_at: datetime
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
