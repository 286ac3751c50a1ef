"""Use case for retrieving a single notification owned by a user."""

from sqlalchemy.orm import Session

from taskpilot.domain.entities import Notification
from taskpilot.infrastructure.repositories import NotificationRepository

from .errors import NotificationNotFoundError


def get_notification(session: Session, notification_id: str, *, user_id: str) -> Notification:
    """Return the notification or raise :class:`NotificationNotFoundError`."""

    notification = NotificationRepository(session).get_for_user(
        notification_id, user_id=user_id
    )
    if notification is None:
        raise NotificationNotFoundError(notification_id)
    return notification
