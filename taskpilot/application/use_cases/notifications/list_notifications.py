"""Use cases for paginated notification listings."""

from __future__ import annotations

from dataclasses import replace

from sqlalchemy.orm import Session

from taskpilot.domain.entities import (
    NotificationFilters,
    NotificationPage,
    NotificationType,
    Pagination,
)
from taskpilot.infrastructure.repositories import NotificationRepository
from taskpilot.utils import days_ago

from .errors import InvalidPaginationError

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
DEFAULT_RECENT_LIMIT = 10
MAX_RECENT_LIMIT = 50
RECENT_WINDOW_DAYS = 7


def normalize_pagination(
    page: int | None,
    limit: int | None,
    *,
    strict: bool = False,
    default_limit: int = DEFAULT_PAGE_SIZE,
    max_limit: int = MAX_PAGE_SIZE,
) -> tuple[int, int]:
    """Return ``(page, limit)`` with ``limit`` clamped to ``[1, max_limit]``.

    Missing or zero values fall back to the defaults. Negative pages are
    floored to 1, unless ``strict`` is set, in which case they are rejected.
    """

    page = page or 1
    limit = limit or default_limit
    if strict and page < 1:
        raise InvalidPaginationError("Page must be a positive number")
    return max(1, page), min(max(1, limit), max_limit)


def list_notifications(
    session: Session,
    user_id: str,
    filters: NotificationFilters | None = None,
    *,
    page: int | None = 1,
    limit: int | None = DEFAULT_PAGE_SIZE,
) -> NotificationPage:
    """Return one page of ``user_id``'s notifications, newest first.

    Organization-scoped listings put unread notifications first.
    """

    filters = filters or NotificationFilters()
    page, limit = normalize_pagination(page, limit)
    repository = NotificationRepository(session)
    notifications = repository.list(
        user_id,
        filters,
        offset=(page - 1) * limit,
        limit=limit,
        unread_first=bool(filters.organization_id),
    )
    total_count = repository.count(user_id, filters)
    return NotificationPage(
        notifications=list(notifications),
        pagination=Pagination.build(page=page, limit=limit, total_count=total_count),
    )


def list_recent_notifications(
    session: Session,
    user_id: str,
    *,
    organization_id: str | None = None,
    limit: int | None = DEFAULT_RECENT_LIMIT,
) -> NotificationPage:
    """Return the newest notifications created during the last seven days."""

    _, limit = normalize_pagination(
        1, limit, default_limit=DEFAULT_RECENT_LIMIT, max_limit=MAX_RECENT_LIMIT
    )
    filters = NotificationFilters(
        organization_id=organization_id, start_date=days_ago(RECENT_WINDOW_DAYS)
    )
    repository = NotificationRepository(session)
    notifications = list(repository.list(user_id, filters, limit=limit))
    return NotificationPage(
        notifications=notifications,
        pagination=Pagination.build(
            page=1, limit=limit, total_count=repository.count(user_id, filters)
        ),
    )


def list_notifications_by_type(
    session: Session,
    user_id: str,
    notification_type: NotificationType | str,
    filters: NotificationFilters | None = None,
    *,
    page: int | None = 1,
    limit: int | None = DEFAULT_PAGE_SIZE,
) -> NotificationPage:
    """Return ``user_id``'s notifications of one type."""

    try:
        notification_type = NotificationType(notification_type)
    except ValueError as exc:
        raise ValueError(f"Unknown notification type: {notification_type}") from exc
    filters = replace(filters or NotificationFilters(), type=notification_type)
    return list_notifications(session, user_id, filters, page=page, limit=limit)


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "MAX_RECENT_LIMIT",
    "list_notifications",
    "list_notifications_by_type",
    "list_recent_notifications",
    "normalize_pagination",
]
