"""
Reminder Service

Hourly sweep that reminds users about upcoming events and training
sessions, equipment that is due back, and policies they have not
acknowledged yet.

Flow per domain:
---------------
1. Fetch pending assignments whose entity falls inside the reminder window
2. Drop the ones that already have a reminder for this occurrence
3. Render the message and store one Notification per (user, occurrence)

Each domain runs in its own session. A failing domain is logged and
reported in the summary; the remaining domains still run.

The (entity, user, kind, occurrence) unique constraint on notifications
is what guarantees at most one reminder per occurrence when two runs
overlap; the lookup in step 2 only avoids pointless inserts.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reserves.core.config import Settings, settings
from reserves.db.database import Database
from reserves.models.assignment import CompletionStatus
from reserves.models.event import Event, EventAssignment
from reserves.models.training import Training, TrainingAssignment
from reserves.models.equipment import Equipment, EquipmentAssignment
from reserves.models.policy import Policy, PolicyCompletion
from reserves.models.user import User
from reserves.repositories.notification_repo import NotificationRepository
from reserves.services.notification_templates import NotificationType, render_notification
from reserves.utils.time_utils import as_utc, utcnow

logger = logging.getLogger(__name__)


# ============================================================
# Result types
# ============================================================

@dataclass(frozen=True)
class ReminderCandidate:
    """One user who may need a reminder about one entity occurrence."""

    entity_id: UUID
    user_id: UUID
    occurrence_at: datetime
    template_data: Dict[str, Any] = field(default_factory=dict)
    url: Optional[str] = None

    def dedup_key(self, reminder_kind: str) -> Tuple[UUID, UUID, str, datetime]:
        return (self.entity_id, self.user_id, reminder_kind, as_utc(self.occurrence_at))


@dataclass
class DomainResult:
    domain: str
    sent: int = 0
    skipped: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ReminderRunSummary:
    results: List[DomainResult]

    @property
    def success(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def failed_domains(self) -> List[str]:
        return [result.domain for result in self.results if not result.ok]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "domains": {
                result.domain: {
                    "sent": result.sent,
                    "skipped": result.skipped,
                    "error": result.error,
                }
                for result in self.results
            },
        }


# ============================================================
# Domains
# ============================================================

class ReminderDomain:
    """
    Knows which assignments of one kind are due for a reminder.

    Subclasses implement fetch_due().
    """

    name: str = ""
    reminder_kind: NotificationType = NotificationType.GENERAL

    def __init__(self, config: Settings = settings):
        self.config = config

    async def fetch_due(self, session: AsyncSession, now: datetime) -> List[ReminderCandidate]:
        raise NotImplementedError


class _ScheduledEntityDomain(ReminderDomain):
    """Entities with a start time: remind pending attendees before it starts."""

    entity_model = None
    assignment_model = None
    window_setting: str = ""
    name_placeholder: str = ""
    url_prefix: str = ""

    def window(self) -> timedelta:
        return timedelta(hours=getattr(self.config, self.window_setting))

    async def fetch_due(self, session: AsyncSession, now: datetime) -> List[ReminderCandidate]:
        entity = self.entity_model
        assignment = self.assignment_model
        horizon = now + self.window()

        stmt = (
            select(assignment.user_id, entity.id, entity.name, entity.starts_at)
            .join(entity, getattr(assignment, assignment.entity_key) == entity.id)
            .join(User, assignment.user_id == User.id)
            .where(
                assignment.completion_status == CompletionStatus.PENDING,
                User.is_active.is_(True),
                entity.starts_at > now,
                entity.starts_at <= horizon,
            )
        )
        result = await session.execute(stmt)

        return [
            ReminderCandidate(
                entity_id=entity_id,
                user_id=user_id,
                occurrence_at=as_utc(starts_at),
                template_data={self.name_placeholder: name},
                url=f"{self.url_prefix}/{entity_id}",
            )
            for user_id, entity_id, name, starts_at in result.all()
        ]


class EventReminderDomain(_ScheduledEntityDomain):
    name = "events"
    reminder_kind = NotificationType.EVENT_REMINDER
    entity_model = Event
    assignment_model = EventAssignment
    window_setting = "EVENT_REMINDER_WINDOW_HOURS"
    name_placeholder = "eventName"
    url_prefix = "/user/events"


class TrainingReminderDomain(_ScheduledEntityDomain):
    name = "training"
    reminder_kind = NotificationType.TRAINING_REMINDER
    entity_model = Training
    assignment_model = TrainingAssignment
    window_setting = "TRAINING_REMINDER_WINDOW_HOURS"
    name_placeholder = "trainingName"
    url_prefix = "/user/training"


class EquipmentReturnReminderDomain(ReminderDomain):
    """Checked-out equipment that is due back soon or already overdue."""

    name = "equipment"
    reminder_kind = NotificationType.EQUIPMENT_RETURN_REMINDER

    async def fetch_due(self, session: AsyncSession, now: datetime) -> List[ReminderCandidate]:
        horizon = now + timedelta(hours=self.config.EQUIPMENT_RETURN_REMINDER_WINDOW_HOURS)

        stmt = (
            select(
                EquipmentAssignment.user_id,
                Equipment.id,
                Equipment.name,
                EquipmentAssignment.expected_return_at,
            )
            .join(Equipment, EquipmentAssignment.equipment_id == Equipment.id)
            .join(User, EquipmentAssignment.user_id == User.id)
            .where(
                EquipmentAssignment.completion_status == CompletionStatus.PENDING,
                EquipmentAssignment.checked_in_at.is_(None),
                EquipmentAssignment.expected_return_at.is_not(None),
                EquipmentAssignment.expected_return_at <= horizon,
                User.is_active.is_(True),
            )
        )
        result = await session.execute(stmt)

        return [
            ReminderCandidate(
                entity_id=equipment_id,
                user_id=user_id,
                occurrence_at=as_utc(expected_return_at),
                template_data={"equipmentName": name},
                url=f"/user/equipment/{equipment_id}",
            )
            for user_id, equipment_id, name, expected_return_at in result.all()
        ]


class PolicyReminderDomain(ReminderDomain):
    """
    Active policies a user has not acknowledged.

    Reminders repeat every POLICY_REMINDER_INTERVAL_DAYS, counted from
    the policy's effective date; each interval is one occurrence.
    """

    name = "policies"
    reminder_kind = NotificationType.POLICY_REMINDER

    def current_occurrence(self, effective_date: datetime, now: datetime) -> datetime:
        interval = timedelta(days=self.config.POLICY_REMINDER_INTERVAL_DAYS)
        effective_date = as_utc(effective_date)
        periods = (now - effective_date) // interval
        return effective_date + periods * interval

    async def fetch_due(self, session: AsyncSession, now: datetime) -> List[ReminderCandidate]:
        stmt = (
            select(PolicyCompletion.user_id, Policy.id, Policy.name, Policy.effective_date)
            .join(Policy, PolicyCompletion.policy_id == Policy.id)
            .join(User, PolicyCompletion.user_id == User.id)
            .where(
                PolicyCompletion.completion_status == CompletionStatus.PENDING,
                Policy.is_active.is_(True),
                Policy.effective_date <= now,
                User.is_active.is_(True),
            )
        )
        result = await session.execute(stmt)

        return [
            ReminderCandidate(
                entity_id=policy_id,
                user_id=user_id,
                occurrence_at=self.current_occurrence(effective_date, now),
                template_data={"policyName": name},
                url=f"/policies/{policy_id}",
            )
            for user_id, policy_id, name, effective_date in result.all()
        ]


def default_domains(config: Settings = settings) -> List[ReminderDomain]:
    return [
        EventReminderDomain(config),
        TrainingReminderDomain(config),
        PolicyReminderDomain(config),
        EquipmentReturnReminderDomain(config),
    ]


# ============================================================
# Processor
# ============================================================

class ReminderProcessor:
    """
    Runs every reminder domain once.

    Usage:
        processor = ReminderProcessor(database)
        ok = await processor.process_all_reminders()
    """

    def __init__(
        self,
        database: Database,
        config: Settings = settings,
        domains: Optional[Sequence[ReminderDomain]] = None,
    ):
        self.database = database
        self.config = config
        self.domains = list(domains) if domains is not None else default_domains(config)

    async def process_all_reminders(self, now: Optional[datetime] = None) -> bool:
        """Run all domains. False if at least one domain failed."""
        summary = await self.run(now)
        return summary.success

    async def run(self, now: Optional[datetime] = None) -> ReminderRunSummary:
        now = as_utc(now or utcnow())
        logger.info(f"Processing all reminders at {now.isoformat()}")

        # Domains touch disjoint tables, so they can run side by side
        results = await asyncio.gather(
            *(self._run_domain(domain, now) for domain in self.domains)
        )
        summary = ReminderRunSummary(results=list(results))

        for result in summary.results:
            if result.ok:
                logger.info(
                    f"{result.domain} reminders: {result.sent} sent, {result.skipped} already sent"
                )
            else:
                logger.warning(f"{result.domain} reminders completed with errors")

        return summary

    async def _run_domain(self, domain: ReminderDomain, now: datetime) -> DomainResult:
        result = DomainResult(domain=domain.name)
        try:
            async with self.database.session() as session:
                await self._send_domain_reminders(session, domain, now, result)
        except Exception as e:
            logger.exception(f"Failed to process {domain.name} reminders")
            result.error = str(e) or type(e).__name__
        return result

    async def _send_domain_reminders(
        self,
        session: AsyncSession,
        domain: ReminderDomain,
        now: datetime,
        result: DomainResult,
    ) -> None:
        kind = domain.reminder_kind.value
        candidates = await domain.fetch_due(session, now)
        if not candidates:
            return

        repo = NotificationRepository(session)
        recorded = await repo.get_reminder_keys(kind, (c.entity_id for c in candidates))
        already_sent = {
            (entity_id, user_id, reminder_kind, as_utc(occurrence_at))
            for entity_id, user_id, reminder_kind, occurrence_at in recorded
        }

        for candidate in candidates:
            key = candidate.dedup_key(kind)
            if key in already_sent:
                result.skipped += 1
                continue
            already_sent.add(key)

            notification = await repo.create_reminder(
                user_id=candidate.user_id,
                type=kind,
                message=render_notification(domain.reminder_kind, candidate.template_data),
                url=candidate.url,
                is_read=False,
                reminder_entity_id=candidate.entity_id,
                reminder_kind=kind,
                reminder_occurrence_at=key[3],
            )
            if notification is None:
                result.skipped += 1
            else:
                result.sent += 1


async def process_all_reminders(
    database: Database,
    now: Optional[datetime] = None,
    config: Settings = settings,
) -> bool:
    """Convenience wrapper used by the cron endpoint and the worker."""
    return await ReminderProcessor(database, config).process_all_reminders(now)
