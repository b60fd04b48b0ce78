from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: UUID
    type: str
    message: str
    url: Optional[str] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": "0e8f5c4a-3c41-4c3f-9af7-2c8d7db3d6d4",
                "type": "equipment_assigned",
                "message": "Equipment assigned: Radio #12",
                "url": "/user/equipment/550e8400-e29b-41d4-a716-446655440000",
                "is_read": False,
                "created_at": "2024-01-01T12:00:00Z",
            }
        }


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    message: str
    updated: int
