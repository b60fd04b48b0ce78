from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from reserves.models.application import ApplicationStatus, Availability, PriorExperience
from reserves.models.user import UserPosition


class ApplicationCreate(BaseModel):
    """Membership application form."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=7, max_length=30)
    driver_license: str = Field(..., min_length=1, max_length=50)
    street_address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=2, max_length=50)
    zip_code: str = Field(..., min_length=3, max_length=20)
    prior_experience: PriorExperience
    availability: Availability
    position: UserPosition = UserPosition.RESERVE
    resume: Optional[str] = Field(None, max_length=20000)

    @field_validator("first_name", "last_name", "city", "street_address")
    @classmethod
    def normalize_text(cls, value: str) -> str:
        normalized = " ".join(value.split())
        if not normalized:
            raise ValueError("Field cannot be empty")
        return normalized

    class Config:
        json_schema_extra = {
            "example": {
                "first_name": "Dana",
                "last_name": "Reyes",
                "email": "dana.reyes@example.com",
                "phone": "555-0134",
                "driver_license": "D1234567",
                "street_address": "12 Elm St",
                "city": "Springfield",
                "state": "IL",
                "zip_code": "62701",
                "prior_experience": "1_to_3_years",
                "availability": "weekends",
                "position": "reserve",
            }
        }


class ApplicationResponse(BaseModel):
    id: UUID
    user_id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    city: str
    state: str
    prior_experience: PriorExperience
    availability: Availability
    position: UserPosition
    status: ApplicationStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
