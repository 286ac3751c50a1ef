"""Use cases for marking notifications as read."""

from sqlalchemy.orm import Session

from taskpilot.infrastructure.repositories import NotificationRepository


def mark_notification_read(session: Session, notification_id: str, *, user_id: str) -> int:
    """Mark one of ``user_id``'s notifications as read.

    Returns the number of rows that changed; re-marking an already read
    notification returns 0 and keeps its original ``read_at``.
    """

    return NotificationRepository(session).mark_as_read(notification_id, user_id=user_id)


def mark_all_notifications_read(
    session: Session, *, user_id: str, organization_id: str | None = None
) -> int:
    """Mark every unread notification of ``user_id`` (optionally per organization) as read."""

    return NotificationRepository(session).mark_all_as_read(
        user_id, organization_id=organization_id
    )
