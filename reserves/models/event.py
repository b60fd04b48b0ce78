import enum

from sqlalchemy import Column, String, Text, DateTime, Enum, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel
from .assignment import AssignmentBase


class EventType(str, enum.Enum):
    PATROL = "patrol"
    TRAINING = "training"
    MEETING = "meeting"
    COMMUNITY_EVENT = "community_event"
    SPECIAL_EVENT = "special_event"


class Event(BaseModel):
    __tablename__ = "events"

    name = Column(String(255), nullable=False)
    event_type = Column(
        Enum(EventType, name="event_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    location = Column(String(255), nullable=False)
    starts_at = Column(DateTime(timezone=True), nullable=False, index=True)
    ends_at = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text, nullable=True)

    assignments = relationship("EventAssignment", back_populates="event", cascade="all, delete-orphan")


class EventAssignment(AssignmentBase):
    __tablename__ = "event_assignments"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_assignments_event_user"),
    )

    entity_key = "event_id"

    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)

    event = relationship("Event", back_populates="assignments")
    user = relationship("User", back_populates="event_assignments")
