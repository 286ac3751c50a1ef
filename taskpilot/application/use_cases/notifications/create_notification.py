"""Use case for persisting a single in-app notification."""

from sqlalchemy.orm import Session

from taskpilot.domain.entities import Notification, NotificationPriority
from taskpilot.infrastructure.repositories import NotificationRepository


def create_notification(session: Session, notification: Notification) -> Notification:
    """Store ``notification`` unread, defaulting its priority to MEDIUM."""

    if not notification.user_id:
        raise ValueError("Notification recipient is required")
    notification.priority = notification.priority or NotificationPriority.MEDIUM
    notification.is_read = False
    notification.read_at = None
    return NotificationRepository(session).create(notification)
