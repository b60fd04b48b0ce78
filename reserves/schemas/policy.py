from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class PolicyBase(BaseModel):
    """Shared attributes for policy creation and updates."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    policy_type: str = Field(..., min_length=1, max_length=100)
    policy_number: str = Field(..., min_length=1, max_length=50, description="Unique policy number")
    policy_url: str = Field(..., min_length=1, max_length=500, description="Link to the policy document")
    effective_date: datetime = Field(..., description="Reminders are counted from this date")
    is_active: bool = True

    @field_validator("policy_number")
    @classmethod
    def normalize_number(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not normalized:
            raise ValueError("Policy number cannot be empty")
        return normalized


class PolicyCreate(PolicyBase):
    class Config:
        json_schema_extra = {
            "example": {
                "name": "Use of Force",
                "policy_type": "operations",
                "policy_number": "OPS-300",
                "policy_url": "https://example.org/policies/ops-300.pdf",
                "effective_date": "2024-01-01T00:00:00Z",
                "is_active": True,
            }
        }


class PolicyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    policy_type: Optional[str] = Field(None, min_length=1, max_length=100)
    policy_url: Optional[str] = Field(None, min_length=1, max_length=500)
    effective_date: Optional[datetime] = None
    is_active: Optional[bool] = None


class PolicyResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    policy_type: str
    policy_number: str
    policy_url: str
    effective_date: datetime
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PolicyResetRequest(BaseModel):
    """Reset one user's acknowledgement, or everyone's when user_id is omitted."""

    user_id: Optional[UUID] = None


class PolicyResetResponse(BaseModel):
    policy_id: UUID
    reset_count: int
