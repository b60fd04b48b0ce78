from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from reserves.models.event import EventType
from reserves.utils.time_utils import as_utc


def _normalize_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = " ".join(value.split())
    if not normalized:
        raise ValueError("Value cannot be empty")
    return normalized


# ============================================================
# Request Schemas (What client sends)
# ============================================================

class EventBase(BaseModel):
    """Shared attributes for event creation and updates."""

    name: str = Field(..., min_length=1, max_length=255, description="Event name")
    event_type: EventType = Field(..., description="Kind of event")
    location: str = Field(..., min_length=1, max_length=255)
    starts_at: datetime = Field(..., description="Start of the event (timezone-aware)")
    ends_at: datetime = Field(..., description="End of the event (timezone-aware)")
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("name", "location")
    @classmethod
    def normalize_text(cls, value: str) -> str:
        return _normalize_text(value)

    @model_validator(mode="after")
    def check_schedule(self):
        if as_utc(self.ends_at) < as_utc(self.starts_at):
            raise ValueError("ends_at must not be before starts_at")
        return self


class EventCreate(EventBase):
    """Schema for creating a new event."""

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Downtown Patrol",
                "event_type": "patrol",
                "location": "Main St & 5th Ave",
                "starts_at": "2024-06-01T18:00:00Z",
                "ends_at": "2024-06-01T22:00:00Z",
                "notes": "Meet at the station 30 minutes early",
            }
        }


class EventUpdate(BaseModel):
    """Schema for updating an existing event. Only sent fields change."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    event_type: Optional[EventType] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("name", "location")
    @classmethod
    def normalize_text(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_text(value)


# ============================================================
# Response Schemas (What server sends back)
# ============================================================

class EventResponse(BaseModel):
    id: UUID
    name: str
    event_type: EventType
    location: str
    starts_at: datetime
    ends_at: datetime
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
