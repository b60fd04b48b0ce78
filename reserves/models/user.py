import enum

from sqlalchemy import Column, String, Boolean, Enum
from sqlalchemy.orm import relationship
from .base import BaseModel


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"
    GUEST = "guest"


class UserPosition(str, enum.Enum):
    OFFICER = "officer"
    RESERVE = "reserve"
    ADMIN = "admin"
    STAFF = "staff"


class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=True)
    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        default=UserRole.GUEST,
        nullable=False,
    )
    position = Column(
        Enum(UserPosition, name="user_position", values_callable=lambda e: [m.value for m in e]),
        default=UserPosition.RESERVE,
        nullable=False,
    )
    # Users are never hard-deleted; deactivate instead
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships - User OWNS these
    event_assignments = relationship("EventAssignment", back_populates="user", cascade="all, delete-orphan")
    training_assignments = relationship("TrainingAssignment", back_populates="user", cascade="all, delete-orphan")
    equipment_assignments = relationship("EquipmentAssignment", back_populates="user", cascade="all, delete-orphan")
    policy_completions = relationship("PolicyCompletion", back_populates="user", cascade="all, delete-orphan")
    applications = relationship("Application", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
