from reserves.repositories.base import BaseRepository
from reserves.repositories.user_repo import UserRepository
from reserves.repositories.notification_repo import NotificationRepository
from reserves.repositories.assignment_repo import (
    AssignmentRepository,
    EventAssignmentRepository,
    TrainingAssignmentRepository,
    EquipmentAssignmentRepository,
    PolicyCompletionRepository,
)
from reserves.repositories.entity_repo import (
    EventRepository,
    TrainingRepository,
    PolicyRepository,
    EquipmentRepository,
)
from reserves.repositories.application_repo import ApplicationRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "NotificationRepository",
    "AssignmentRepository",
    "EventAssignmentRepository",
    "TrainingAssignmentRepository",
    "EquipmentAssignmentRepository",
    "PolicyCompletionRepository",
    "EventRepository",
    "TrainingRepository",
    "PolicyRepository",
    "EquipmentRepository",
    "ApplicationRepository",
]
