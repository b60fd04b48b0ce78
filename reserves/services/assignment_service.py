"""
Assignment Service

Business logic around assignments:
- Event / training signups and leaving
- Completion status changes by admins
- Equipment check-out and return
- Policy acknowledgement, reset and roll-out to reserves

Every state change that a person should hear about creates a
notification. Notification failures are logged and never undo
the assignment change itself.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from reserves.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    ValidationError,
)
from reserves.models.assignment import CompletionStatus
from reserves.models.event import EventAssignment
from reserves.models.training import TrainingAssignment
from reserves.models.equipment import EquipmentAssignment, EquipmentCondition
from reserves.models.policy import PolicyCompletion
from reserves.models.user import User
from reserves.repositories.assignment_repo import (
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
from reserves.repositories.user_repo import UserRepository
from reserves.services.notification_service import NotificationService
from reserves.services.notification_templates import NotificationType
from reserves.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


class AssignmentService:
    """Service class for assignment operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.events = EventRepository(db)
        self.trainings = TrainingRepository(db)
        self.policies = PolicyRepository(db)
        self.equipment = EquipmentRepository(db)
        self.event_assignments = EventAssignmentRepository(db)
        self.training_assignments = TrainingAssignmentRepository(db)
        self.equipment_assignments = EquipmentAssignmentRepository(db)
        self.policy_completions = PolicyCompletionRepository(db)
        self.notifications = NotificationService(db)

    # ============================================================
    # Events
    # ============================================================
    async def sign_up_for_event(self, event_id: UUID, user: User) -> EventAssignment:
        """
        Sign the user up for an event and tell the admins.

        Raises:
            NotFoundError: event does not exist
            ConflictError: user is already signed up
        """
        event = await self.events.get_or_404(event_id)
        assignment = await self.event_assignments.create_assignment(
            entity_id=event.id, user_id=user.id
        )
        await self.notifications.try_notify(
            self.notifications.notify_admins(
                NotificationType.EVENT_SIGNUP,
                {"userName": user.full_name, "eventName": event.name},
                url=f"/admin/events/{event.id}",
            )
        )
        return assignment

    async def leave_event(self, event_id: UUID, user: User) -> EventAssignment:
        event = await self.events.get_or_404(event_id)
        assignment = await self.event_assignments.delete_assignment(event.id, user.id)
        await self.notifications.try_notify(
            self.notifications.notify_admins(
                NotificationType.GENERAL,
                {"message": f"{user.full_name} has left event: {event.name}"},
            )
        )
        return assignment

    async def get_event_participants(self, event_id: UUID) -> List[EventAssignment]:
        event = await self.events.get_or_404(event_id)
        return await self.event_assignments.get_for_entity(event.id)

    async def set_event_status(
        self,
        event_id: UUID,
        user_id: UUID,
        status: Union[CompletionStatus, str],
        notes: Optional[str] = None,
    ) -> EventAssignment:
        return await self.event_assignments.update_status(event_id, user_id, status, notes)

    # ============================================================
    # Training
    # ============================================================
    async def sign_up_for_training(self, training_id: UUID, user: User) -> TrainingAssignment:
        training = await self.trainings.get_or_404(training_id)
        assignment = await self.training_assignments.create_assignment(
            entity_id=training.id, user_id=user.id
        )
        await self.notifications.try_notify(
            self.notifications.notify_admins(
                NotificationType.TRAINING_SIGNUP,
                {"userName": user.full_name, "trainingName": training.name},
                url=f"/admin/training/{training.id}",
            )
        )
        return assignment

    async def leave_training(self, training_id: UUID, user: User) -> TrainingAssignment:
        training = await self.trainings.get_or_404(training_id)
        assignment = await self.training_assignments.delete_assignment(training.id, user.id)
        await self.notifications.try_notify(
            self.notifications.notify_admins(
                NotificationType.GENERAL,
                {"message": f"{user.full_name} has left training: {training.name}"},
            )
        )
        return assignment

    async def get_training_participants(self, training_id: UUID) -> List[TrainingAssignment]:
        training = await self.trainings.get_or_404(training_id)
        return await self.training_assignments.get_for_entity(training.id)

    async def set_training_status(
        self,
        training_id: UUID,
        user_id: UUID,
        status: Union[CompletionStatus, str],
        notes: Optional[str] = None,
    ) -> TrainingAssignment:
        return await self.training_assignments.update_status(training_id, user_id, status, notes)

    # ============================================================
    # Equipment
    # ============================================================
    async def assign_equipment(
        self,
        equipment_id: UUID,
        user_id: UUID,
        condition: EquipmentCondition = EquipmentCondition.GOOD,
        expected_return_at: Optional[datetime] = None,
        notes: Optional[str] = None,
        checked_out_at: Optional[datetime] = None,
    ) -> EquipmentAssignment:
        """
        Check equipment out to a user.

        The equipment flags and the assignment row are written in the
        same commit.

        Raises:
            NotFoundError: equipment or user does not exist
            ValidationError: equipment is obsolete
            ConflictError: equipment is already checked out, or this
                user still has an open assignment row for it
        """
        item = await self.equipment.get_or_404(equipment_id)
        user = await self.users.get_or_404(user_id)

        if item.is_obsolete:
            raise ValidationError(f"Equipment {item.name} is obsolete")
        if item.is_assigned:
            raise ConflictError(f"Equipment {item.name} is already assigned")

        # A returned row for the same pair is replaced by the new checkout
        item.is_assigned = True
        item.assigned_to = user.id
        assignment = await self.equipment_assignments.recreate_assignment(
            entity_id=item.id,
            user_id=user.id,
            condition=condition,
            checked_out_at=checked_out_at or utcnow(),
            expected_return_at=expected_return_at,
            completion_notes=notes,
        )

        await self.notifications.try_notify(
            self.notifications.create_notification(
                user.id,
                NotificationType.EQUIPMENT_ASSIGNED,
                {"equipmentName": item.name},
                url=f"/user/equipment/{item.id}",
            )
        )
        return assignment

    async def return_equipment(
        self,
        equipment_id: UUID,
        user_id: UUID,
        condition: EquipmentCondition,
        notes: Optional[str] = None,
    ) -> EquipmentAssignment:
        """
        Check equipment back in and free it for the next assignment.

        Raises:
            NotFoundError: equipment or assignment does not exist
            InvalidTransitionError: already returned
        """
        item = await self.equipment.get_or_404(equipment_id)
        assignment = await self.equipment_assignments.get_required(item.id, user_id)
        if assignment.is_terminal:
            raise InvalidTransitionError(f"Equipment {item.name} was already returned")

        item.is_assigned = False
        item.assigned_to = None
        assignment = await self.equipment_assignments.update_status(
            item.id,
            user_id,
            CompletionStatus.COMPLETED,
            notes=notes,
            checked_in_at=utcnow(),
            condition=condition,
        )

        await self.notifications.try_notify(
            self.notifications.create_notification(
                user_id,
                NotificationType.EQUIPMENT_RETURNED,
                {"equipmentName": item.name},
            )
        )
        return assignment

    async def update_equipment_assignment(
        self,
        equipment_id: UUID,
        user_id: UUID,
        expected_return_at: Optional[datetime] = None,
        condition: Optional[EquipmentCondition] = None,
        notes: Optional[str] = None,
    ) -> EquipmentAssignment:
        """
        Edit an open checkout. Fields left as None keep their value.

        Moving expected_return_at starts a new reminder occurrence.

        Raises:
            NotFoundError: equipment or assignment does not exist
            InvalidTransitionError: the equipment was already returned
        """
        item = await self.equipment.get_or_404(equipment_id)

        fields = {}
        if expected_return_at is not None:
            fields["expected_return_at"] = expected_return_at
        if condition is not None:
            fields["condition"] = condition
        if notes is not None:
            fields["completion_notes"] = notes

        assignment = await self.equipment_assignments.update_open(item.id, user_id, **fields)
        logger.info(f"Updated checkout of {item.name} for {user_id}: {sorted(fields)}")
        return assignment

    async def get_equipment_history(self, equipment_id: UUID) -> List[EquipmentAssignment]:
        item = await self.equipment.get_or_404(equipment_id)
        return await self.equipment_assignments.get_for_entity(item.id)

    # ============================================================
    # Policies
    # ============================================================
    async def acknowledge_policy(self, policy_id: UUID, user: User) -> PolicyCompletion:
        """
        Record that the user read and acknowledged a policy.

        Raises:
            NotFoundError: policy does not exist
            ValidationError: policy is no longer active
            InvalidTransitionError: already acknowledged or excused
        """
        policy = await self.policies.get_or_404(policy_id)
        if not policy.is_active:
            raise ValidationError(f"Policy {policy.policy_number} is not active")

        now = utcnow()
        existing = await self.policy_completions.get(policy.id, user.id)
        if existing is None:
            completion = await self.policy_completions.create_assignment(
                entity_id=policy.id,
                user_id=user.id,
                completion_status=CompletionStatus.COMPLETED,
                acknowledged_at=now,
            )
        else:
            completion = await self.policy_completions.update_status(
                policy.id, user.id, CompletionStatus.COMPLETED, acknowledged_at=now
            )

        logger.info(f"Policy {policy.policy_number} acknowledged by {user.id}")
        return completion

    async def set_policy_status(
        self,
        policy_id: UUID,
        user_id: UUID,
        status: Union[CompletionStatus, str],
        notes: Optional[str] = None,
    ) -> PolicyCompletion:
        return await self.policy_completions.update_status(policy_id, user_id, status, notes)

    async def get_policy_completions(self, policy_id: UUID) -> List[PolicyCompletion]:
        policy = await self.policies.get_or_404(policy_id)
        return await self.policy_completions.get_for_entity(policy.id)

    async def reset_policy_completion(
        self,
        policy_id: UUID,
        user_id: Optional[UUID] = None,
    ) -> int:
        """
        Require a policy to be acknowledged again.

        Completion rows are replaced by fresh pending ones, either for a
        single user or for everyone who had a row. Returns the number of
        users reset.

        Raises:
            NotFoundError: policy, or the user's completion, does not exist
        """
        policy = await self.policies.get_or_404(policy_id)

        if user_id is not None:
            await self.policy_completions.delete_assignment(policy.id, user_id)
            user_ids = [user_id]
        else:
            existing = await self.policy_completions.get_for_entity(policy.id)
            user_ids = [completion.user_id for completion in existing]
            await self.policy_completions.delete_all_for_entity(policy.id)

        for uid in user_ids:
            await self.policy_completions.create_assignment(entity_id=policy.id, user_id=uid)

        logger.info(f"Reset policy {policy.policy_number} for {len(user_ids)} user(s)")
        return len(user_ids)

    async def assign_policy_to_reserves(self, policy_id: UUID) -> List[PolicyCompletion]:
        """Create pending completions for every active reserve who has none."""
        policy = await self.policies.get_or_404(policy_id)
        existing = {c.user_id for c in await self.policy_completions.get_for_entity(policy.id)}

        created = []
        for user in await self.users.get_reserves():
            if user.id in existing:
                continue
            created.append(
                await self.policy_completions.create_assignment(entity_id=policy.id, user_id=user.id)
            )

        logger.info(f"Assigned policy {policy.policy_number} to {len(created)} reserve(s)")
        return created

    # ============================================================
    # Per-user overview
    # ============================================================
    async def get_user_assignments(self, user_id: UUID) -> Dict[str, list]:
        return {
            "events": await self.event_assignments.get_for_user(user_id),
            "training": await self.training_assignments.get_for_user(user_id),
            "equipment": await self.equipment_assignments.get_for_user(user_id),
            "policies": await self.policy_completions.get_for_user(user_id),
        }
