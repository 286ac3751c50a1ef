"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    """Kinds of notification; drives recipient rules and message templates."""

    TASK_ASSIGNED = "TASK_ASSIGNED"
    TASK_STATUS_CHANGED = "TASK_STATUS_CHANGED"
    TASK_COMMENTED = "TASK_COMMENTED"
    TASK_DUE_SOON = "TASK_DUE_SOON"
    PROJECT_CREATED = "PROJECT_CREATED"
    PROJECT_UPDATED = "PROJECT_UPDATED"
    WORKSPACE_INVITED = "WORKSPACE_INVITED"
    MENTION = "MENTION"
    SYSTEM = "SYSTEM"
    # Custom types: recipients come from the policy only.
    TASK_UPDATED = "TASK_UPDATED"
    TASK_COMPLETED = "TASK_COMPLETED"
    SPRINT_STARTED = "SPRINT_STARTED"
    SPRINT_COMPLETED = "SPRINT_COMPLETED"


class NotificationPriority(str, Enum):
    """Urgency hint shown alongside a notification."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass
class Notification:
    """In-app message delivered to a specific user."""

    id: str | None
    user_id: str
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority = NotificationPriority.MEDIUM
    organization_id: str | None = None
    entity_type: str | None = None
    entity_id: str | None = None
    action_url: str | None = None
    created_by: str | None = None
    is_read: bool = False
    read_at: datetime | None = None
    created_at: datetime | None = None


__all__ = ["Notification", "NotificationPriority", "NotificationType"]
