from reserves.models.base import Base
from reserves.models.user import User, UserRole, UserPosition
from reserves.models.assignment import CompletionStatus, TERMINAL_STATUSES
from reserves.models.event import Event, EventAssignment, EventType
from reserves.models.training import Training, TrainingAssignment
from reserves.models.equipment import Equipment, EquipmentAssignment, EquipmentCondition
from reserves.models.policy import Policy, PolicyCompletion
from reserves.models.application import (
    Application,
    ApplicationStatus,
    Availability,
    PriorExperience,
)
from reserves.models.notification import Notification

__all__ = [
    "Base",
    "User",
    "UserRole",
    "UserPosition",
    "CompletionStatus",
    "TERMINAL_STATUSES",
    "Event",
    "EventAssignment",
    "EventType",
    "Training",
    "TrainingAssignment",
    "Equipment",
    "EquipmentAssignment",
    "EquipmentCondition",
    "Policy",
    "PolicyCompletion",
    "Application",
    "ApplicationStatus",
    "Availability",
    "PriorExperience",
    "Notification",
]
