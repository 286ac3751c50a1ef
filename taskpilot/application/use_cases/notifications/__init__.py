"""Activity logging, notification dispatch and the notification store."""

from .create_notification import create_notification
from .delete_notification import delete_notification, delete_notifications
from .delivery import DeliveryReport, NotificationDelivery
from .dispatch import (
    ActivityDispatcher,
    build_activity_dispatcher,
    extract_entity_id,
    get_activity_dispatcher,
    notify_activity,
)
from .due_soon import dispatch_due_soon_reminders, run_due_soon_reminders
from .errors import InvalidPaginationError, NotificationNotFoundError
from .get_notification import get_notification
from .get_notification_stats import get_notification_stats, get_unread_count
from .list_notifications import (
    list_notifications,
    list_notifications_by_type,
    list_recent_notifications,
    normalize_pagination,
)
from .list_user_organization_notifications import list_user_organization_notifications
from .mark_notification_read import mark_all_notifications_read, mark_notification_read
from .recipients import resolve_recipients

__all__ = [
    "ActivityDispatcher",
    "DeliveryReport",
    "InvalidPaginationError",
    "NotificationDelivery",
    "NotificationNotFoundError",
    "build_activity_dispatcher",
    "create_notification",
    "delete_notification",
    "delete_notifications",
    "dispatch_due_soon_reminders",
    "extract_entity_id",
    "get_activity_dispatcher",
    "get_notification",
    "get_notification_stats",
    "get_unread_count",
    "list_notifications",
    "list_notifications_by_type",
    "list_recent_notifications",
    "list_user_organization_notifications",
    "mark_all_notifications_read",
    "mark_notification_read",
    "normalize_pagination",
    "notify_activity",
    "resolve_recipients",
    "run_due_soon_reminders",
]
