import enum

from sqlalchemy import Column, String, Text, Enum, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from .base import BaseModel
from .user import UserPosition


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PriorExperience(str, enum.Enum):
    NONE = "none"
    LESS_THAN_1_YEAR = "less_than_1_year"
    ONE_TO_3_YEARS = "1_to_3_years"
    MORE_THAN_3_YEARS = "more_than_3_years"


class Availability(str, enum.Enum):
    WEEKDAYS = "weekdays"
    WEEKENDS = "weekends"
    BOTH = "both"
    FLEXIBLE = "flexible"


def _values(e):
    return [m.value for m in e]


class Application(BaseModel):
    __tablename__ = "applications"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(30), nullable=False)
    driver_license = Column(String(50), nullable=False)
    street_address = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(50), nullable=False)
    zip_code = Column(String(20), nullable=False)
    prior_experience = Column(Enum(PriorExperience, name="prior_experience", values_callable=_values), nullable=False)
    availability = Column(Enum(Availability, name="availability", values_callable=_values), nullable=False)
    resume = Column(Text, nullable=True)
    position = Column(
        Enum(UserPosition, name="application_position", values_callable=_values),
        default=UserPosition.RESERVE,
        nullable=False,
    )
    status = Column(
        Enum(ApplicationStatus, name="application_status", values_callable=_values),
        default=ApplicationStatus.PENDING,
        nullable=False,
    )

    user = relationship("User", back_populates="applications")
