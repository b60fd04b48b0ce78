from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel
from .assignment import AssignmentBase


class Policy(BaseModel):
    __tablename__ = "policies"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    policy_type = Column(String(100), nullable=False)
    policy_number = Column(String(50), nullable=False, unique=True)
    policy_url = Column(String(500), nullable=False)
    effective_date = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    completions = relationship("PolicyCompletion", back_populates="policy", cascade="all, delete-orphan")


class PolicyCompletion(AssignmentBase):
    """A user's acknowledgement of a policy. COMPLETED means acknowledged."""

    __tablename__ = "policy_completions"
    __table_args__ = (
        UniqueConstraint("policy_id", "user_id", name="uq_policy_completions_policy_user"),
    )

    entity_key = "policy_id"

    policy_id = Column(Uuid(as_uuid=True), ForeignKey("policies.id", ondelete="CASCADE"), nullable=False, index=True)
    acknowledged_at = Column(DateTime(timezone=True), nullable=True)

    policy = relationship("Policy", back_populates="completions")
    user = relationship("User", back_populates="policy_completions")
