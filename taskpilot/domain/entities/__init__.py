"""Domain entities exposed by the application."""

from .activity_log import ActivityLogEntry
from .entity_preview import EntityPreview
from .event import Actor, ActivityPolicy, DispatchEvent, NotificationPolicy, read_field
from .notification import Notification, NotificationPriority, NotificationType
from .notification_query import (
    NotificationFilters,
    NotificationPage,
    NotificationStats,
    NotificationSummary,
    NotificationWithEntity,
    OrganizationNotificationPage,
    Pagination,
)
from .task import DueTask
from .user import User

__all__ = [
    "ActivityLogEntry",
    "ActivityPolicy",
    "Actor",
    "DispatchEvent",
    "DueTask",
    "EntityPreview",
    "Notification",
    "NotificationFilters",
    "NotificationPage",
    "NotificationPolicy",
    "NotificationPriority",
    "NotificationStats",
    "NotificationSummary",
    "NotificationType",
    "NotificationWithEntity",
    "OrganizationNotificationPage",
    "Pagination",
    "User",
    "read_field",
]
