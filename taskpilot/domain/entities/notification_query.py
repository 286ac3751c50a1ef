"""Value objects returned by notification listing and statistics queries."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime

from .entity_preview import EntityPreview
from .notification import Notification, NotificationPriority, NotificationType


@dataclass(frozen=True)
class NotificationFilters:
    """Optional criteria applied on top of the owner scope."""

    is_read: bool | None = None
    type: NotificationType | None = None
    priority: NotificationPriority | None = None
    organization_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    total_count: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, *, page: int, limit: int, total_count: int) -> "Pagination":
        total_pages = math.ceil(total_count / limit)
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_count=total_count,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


@dataclass(frozen=True)
class NotificationPage:
    notifications: list[Notification]
    pagination: Pagination


@dataclass(frozen=True)
class NotificationStats:
    total: int
    unread: int
    read: int
    recent: int
    by_type: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationSummary:
    total: int
    unread: int
    by_type: dict[str, int] = field(default_factory=dict)
    by_priority: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationWithEntity:
    notification: Notification
    entity: EntityPreview | None


@dataclass(frozen=True)
class OrganizationNotificationPage:
    notifications: list[NotificationWithEntity]
    pagination: Pagination
    summary: NotificationSummary


__all__ = [
    "NotificationFilters",
    "NotificationPage",
    "NotificationStats",
    "NotificationSummary",
    "NotificationWithEntity",
    "OrganizationNotificationPage",
    "Pagination",
]
