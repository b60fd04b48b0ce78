from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class UserSummary(BaseModel):
    """The part of a user embedded in other responses."""

    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None

    class Config:
        from_attributes = True
