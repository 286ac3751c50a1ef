"""Use cases for removing notifications."""

from collections.abc import Sequence

from sqlalchemy.orm import Session

from taskpilot.infrastructure.repositories import NotificationRepository


def delete_notification(session: Session, notification_id: str, *, user_id: str) -> int:
    return NotificationRepository(session).delete(notification_id, user_id=user_id)


def delete_notifications(
    session: Session, notification_ids: Sequence[str], *, user_id: str
) -> int:
    """Delete the listed notifications owned by ``user_id``.

    Identifiers that belong to other users are silently ignored.
    """

    if not notification_ids:
        raise ValueError("notification_ids must be a non-empty list")
    return NotificationRepository(session).delete_many(notification_ids, user_id=user_id)
