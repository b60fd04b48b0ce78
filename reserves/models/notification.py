from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import BaseModel


class Notification(BaseModel):
    __tablename__ = "notifications"
    __table_args__ = (
        # One reminder per (entity, user, kind, occurrence). Rows that are not
        # reminders leave these columns NULL, which never collide.
        UniqueConstraint(
            "reminder_entity_id",
            "user_id",
            "reminder_kind",
            "reminder_occurrence_at",
            name="uq_notifications_reminder_key",
        ),
    )

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(50), nullable=False, default="general", index=True)
    message = Column(Text, nullable=False)
    url = Column(String(500), nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)

    # Reminder dedup key
    reminder_entity_id = Column(Uuid(as_uuid=True), nullable=True)
    reminder_kind = Column(String(50), nullable=True)
    reminder_occurrence_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", backref="notifications")
