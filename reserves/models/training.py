from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel
from .assignment import AssignmentBase


class Training(BaseModel):
    __tablename__ = "trainings"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=False)
    training_type = Column(String(100), nullable=False)
    instructor = Column(String(200), nullable=False)
    starts_at = Column(DateTime(timezone=True), nullable=False, index=True)
    ends_at = Column(DateTime(timezone=True), nullable=False)

    assignments = relationship("TrainingAssignment", back_populates="training", cascade="all, delete-orphan")


class TrainingAssignment(AssignmentBase):
    __tablename__ = "training_assignments"
    __table_args__ = (
        UniqueConstraint("training_id", "user_id", name="uq_training_assignments_training_user"),
    )

    entity_key = "training_id"

    training_id = Column(Uuid(as_uuid=True), ForeignKey("trainings.id", ondelete="CASCADE"), nullable=False, index=True)

    training = relationship("Training", back_populates="assignments")
    user = relationship("User", back_populates="training_assignments")
