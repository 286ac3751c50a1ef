"""Use case for the per-user, per-organization notification feed."""

from __future__ import annotations

from dataclasses import replace

from sqlalchemy.orm import Session

from taskpilot.domain.entities import (
    NotificationFilters,
    NotificationSummary,
    NotificationWithEntity,
    OrganizationNotificationPage,
    Pagination,
)
from taskpilot.infrastructure.repositories import (
    EntityDetailRepository,
    NotificationRepository,
)

from .list_notifications import DEFAULT_PAGE_SIZE, normalize_pagination


def list_user_organization_notifications(
    session: Session,
    *,
    user_id: str,
    organization_id: str,
    filters: NotificationFilters | None = None,
    page: int | None = 1,
    limit: int | None = DEFAULT_PAGE_SIZE,
) -> OrganizationNotificationPage:
    """Return unread-first notifications enriched with entity previews and a summary."""

    page, limit = normalize_pagination(page, limit)
    filters = replace(filters or NotificationFilters(), organization_id=organization_id)
    repository = NotificationRepository(session)
    entities = EntityDetailRepository(session)

    notifications = repository.list(
        user_id,
        filters,
        offset=(page - 1) * limit,
        limit=limit,
        unread_first=True,
    )
    items = [
        NotificationWithEntity(
            notification=notification,
            entity=entities.resolve(notification.entity_type, notification.entity_id),
        )
        for notification in notifications
    ]

    total_count = repository.count(user_id, filters)
    summary = NotificationSummary(
        total=total_count,
        unread=repository.count(user_id, replace(filters, is_read=False)),
        by_type=repository.count_by_type(user_id, filters),
        by_priority=repository.count_by_priority(user_id, filters),
    )
    return OrganizationNotificationPage(
        notifications=items,
        pagination=Pagination.build(page=page, limit=limit, total_count=total_count),
        summary=summary,
    )
