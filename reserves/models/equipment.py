import enum

from sqlalchemy import Column, String, Text, Boolean, DateTime, Enum, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel
from .assignment import AssignmentBase, CompletionStatus


class EquipmentCondition(str, enum.Enum):
    NEW = "new"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    DAMAGED = "damaged/broken"


class Equipment(BaseModel):
    __tablename__ = "equipment"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    serial_number = Column(String(100), nullable=True, index=True)
    purchase_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    is_assigned = Column(Boolean, default=False, nullable=False)
    assigned_to = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_obsolete = Column(Boolean, default=False, nullable=False)

    assignments = relationship("EquipmentAssignment", back_populates="equipment", cascade="all, delete-orphan")


class EquipmentAssignment(AssignmentBase):
    """A piece of equipment checked out to a user. COMPLETED means returned."""

    __tablename__ = "equipment_assignments"
    __table_args__ = (
        UniqueConstraint("equipment_id", "user_id", name="uq_equipment_assignments_equipment_user"),
    )

    entity_key = "equipment_id"
    allowed_statuses = frozenset({CompletionStatus.COMPLETED})

    equipment_id = Column(Uuid(as_uuid=True), ForeignKey("equipment.id", ondelete="CASCADE"), nullable=False, index=True)
    condition = Column(
        Enum(EquipmentCondition, name="equipment_condition", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=EquipmentCondition.GOOD,
    )
    checked_out_at = Column(DateTime(timezone=True), nullable=False)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)
    expected_return_at = Column(DateTime(timezone=True), nullable=True, index=True)

    equipment = relationship("Equipment", back_populates="assignments")
    user = relationship("User", back_populates="equipment_assignments")
