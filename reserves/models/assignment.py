"""
Assignment Base

Shared columns for the four assignment tables (event, training,
equipment, policy). An assignment links one user to one entity and
tracks how far the user got with it.
"""

import enum

from sqlalchemy import Column, Enum, ForeignKey, Text, Uuid
from sqlalchemy.orm import declared_attr

from .base import BaseModel


class CompletionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    EXCUSED = "excused"


TERMINAL_STATUSES = frozenset({CompletionStatus.COMPLETED, CompletionStatus.EXCUSED})


class AssignmentBase(BaseModel):
    __abstract__ = True

    # Name of the column pointing at the parent entity (event_id, ...)
    entity_key: str = ""

    # Statuses reachable from PENDING for this kind of assignment
    allowed_statuses = frozenset({CompletionStatus.COMPLETED, CompletionStatus.EXCUSED})

    @declared_attr
    def user_id(cls):
        return Column(
            Uuid(as_uuid=True),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    completion_status = Column(
        Enum(
            CompletionStatus,
            name="completion_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        default=CompletionStatus.PENDING,
        nullable=False,
    )
    completion_notes = Column(Text, nullable=True)

    @property
    def entity_id(self):
        return getattr(self, self.entity_key)

    @property
    def is_terminal(self) -> bool:
        return self.completion_status in TERMINAL_STATUSES
