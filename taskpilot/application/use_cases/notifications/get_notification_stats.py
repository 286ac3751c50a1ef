"""Use cases for notification counters."""

from sqlalchemy.orm import Session

from taskpilot.domain.entities import NotificationFilters, NotificationStats
from taskpilot.infrastructure.repositories import NotificationRepository
from taskpilot.utils import days_ago

from .list_notifications import RECENT_WINDOW_DAYS


def get_unread_count(
    session: Session, *, user_id: str, organization_id: str | None = None
) -> int:
    filters = NotificationFilters(is_read=False, organization_id=organization_id)
    return NotificationRepository(session).count(user_id, filters)


def get_notification_stats(
    session: Session, *, user_id: str, organization_id: str | None = None
) -> NotificationStats:
    """Return totals, read/unread split, last-week count and per-type counts."""

    repository = NotificationRepository(session)
    scope = NotificationFilters(organization_id=organization_id)
    total = repository.count(user_id, scope)
    unread = get_unread_count(session, user_id=user_id, organization_id=organization_id)
    return NotificationStats(
        total=total,
        unread=unread,
        read=total - unread,
        recent=repository.count_created_since(user_id, scope, days_ago(RECENT_WINDOW_DAYS)),
        by_type=repository.count_by_type(user_id, scope),
    )
