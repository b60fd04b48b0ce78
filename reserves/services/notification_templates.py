"""
Notification Templates

Maps every notification kind to one message template and renders it
with placeholder data. Also provides recipient de-duplication used
before fanning a notification out to many users.
"""

import enum
import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, TypeVar, Union

logger = logging.getLogger(__name__)


class NotificationType(str, enum.Enum):
    APPLICATION_SUBMITTED = "application_submitted"
    APPLICATION_APPROVED = "application_approved"
    APPLICATION_REJECTED = "application_rejected"
    EVENT_CREATED = "event_created"
    EVENT_UPDATED = "event_updated"
    EVENT_SIGNUP = "event_signup"
    EVENT_SIGNUP_REMINDER = "event_signup_reminder"
    EVENT_REMINDER = "event_reminder"
    TRAINING_CREATED = "training_created"
    TRAINING_UPDATED = "training_updated"
    TRAINING_SIGNUP = "training_signup"
    TRAINING_SIGNUP_REMINDER = "training_signup_reminder"
    TRAINING_REMINDER = "training_reminder"
    EQUIPMENT_ASSIGNED = "equipment_assigned"
    EQUIPMENT_RETURNED = "equipment_returned"
    EQUIPMENT_RETURN_REMINDER = "equipment_return_reminder"
    POLICY_CREATED = "policy_created"
    POLICY_UPDATED = "policy_updated"
    POLICY_REMINDER = "policy_reminder"
    GENERAL = "general"
    ANNOUNCEMENT = "announcement"


NOTIFICATION_TEMPLATES = {
    NotificationType.APPLICATION_SUBMITTED: "New application submitted by {userName}",
    NotificationType.APPLICATION_APPROVED: "Your application has been approved",
    NotificationType.APPLICATION_REJECTED: "Your application has been rejected",
    NotificationType.EVENT_CREATED: "New event: {eventName}",
    NotificationType.EVENT_UPDATED: "Event updated: {eventName}",
    NotificationType.EVENT_SIGNUP: "{userName} signed up for {eventName}",
    NotificationType.EVENT_SIGNUP_REMINDER: "Reminder: You are signed up for {eventName}",
    NotificationType.EVENT_REMINDER: "Reminder: Event {eventName} is happening soon",
    NotificationType.TRAINING_CREATED: "New training: {trainingName}",
    NotificationType.TRAINING_UPDATED: "Training updated: {trainingName}",
    NotificationType.TRAINING_SIGNUP: "{userName} signed up for {trainingName}",
    NotificationType.TRAINING_SIGNUP_REMINDER: "Reminder: You are signed up for {trainingName}",
    NotificationType.TRAINING_REMINDER: "Reminder: Training {trainingName} is happening soon",
    NotificationType.EQUIPMENT_ASSIGNED: "Equipment assigned: {equipmentName}",
    NotificationType.EQUIPMENT_RETURNED: "Equipment returned: {equipmentName}",
    NotificationType.EQUIPMENT_RETURN_REMINDER: "Please return equipment: {equipmentName}",
    NotificationType.POLICY_CREATED: "New policy: {policyName}",
    NotificationType.POLICY_UPDATED: "Policy updated: {policyName}",
    NotificationType.POLICY_REMINDER: "Please review policy: {policyName}",
    NotificationType.GENERAL: "{message}",
    NotificationType.ANNOUNCEMENT: "{message}",
}


def _resolve_type(notification_type: Union[NotificationType, str]) -> NotificationType:
    if isinstance(notification_type, NotificationType):
        return notification_type
    try:
        return NotificationType(notification_type)
    except ValueError:
        logger.warning(f"Unknown notification type {notification_type!r}, using general template")
        return NotificationType.GENERAL


def render_notification(
    notification_type: Union[NotificationType, str],
    template_data: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Render the message for a notification kind.

    Every ``{key}`` token for each key in ``template_data`` is replaced,
    including repeated tokens. Keys without data stay in the output as
    literal ``{key}`` tokens. Never raises.

    Example:
        >>> render_notification("equipment_assigned", {"equipmentName": "Radio #12"})
        'Equipment assigned: Radio #12'
    """
    message = NOTIFICATION_TEMPLATES[_resolve_type(notification_type)]

    if not isinstance(template_data, Mapping):
        return message

    for key, value in template_data.items():
        try:
            message = message.replace("{" + str(key) + "}", str(value))
        except Exception as e:
            # A value whose __str__ blows up leaves its token in place
            logger.warning(f"Could not substitute {key!r} in notification template: {e}")

    return message


# ============================================================
# Recipient de-duplication
# ============================================================

T = TypeVar("T")


def _recipient_id(recipient: Any) -> Any:
    if isinstance(recipient, Mapping):
        return recipient["id"]
    return recipient.id


def deduplicate_recipients(recipients: Iterable[T]) -> List[T]:
    """
    Drop recipients whose ``id`` was already seen, keeping first occurrences.

    Recipients can be ORM objects (``.id``) or mappings (``["id"]``).
    """
    seen = set()
    unique = []
    for recipient in recipients:
        recipient_id = _recipient_id(recipient)
        if recipient_id in seen:
            continue
        seen.add(recipient_id)
        unique.append(recipient)
    return unique
