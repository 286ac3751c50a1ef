"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from taskpilot.domain.entities import NotificationPriority, NotificationType


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    type: NotificationType
    priority: NotificationPriority
    title: str
    message: str
    organization_id: str | None = None
    entity_type: str | None = None
    entity_id: str | None = None
    action_url: str | None = None
    created_by: str | None = None
    is_read: bool = False
    read_at: datetime | None = None
    created_at: datetime | None = None


class EntityPreviewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    name: str
    slug: str | None = None
    parent: dict[str, Any] | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


class NotificationWithEntityRead(NotificationRead):
    entity: EntityPreviewRead | None = None


class PaginationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current_page: int
    total_pages: int
    total_count: int
    has_next_page: bool
    has_prev_page: bool


class NotificationPageRead(BaseModel):
    notifications: list[NotificationRead]
    pagination: PaginationRead


class RecentNotificationsRead(BaseModel):
    notifications: list[NotificationRead]
    count: int


class NotificationSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    unread: int
    by_type: dict[str, int] = Field(default_factory=dict)
    by_priority: dict[str, int] = Field(default_factory=dict)


class OrganizationNotificationPageRead(BaseModel):
    notifications: list[NotificationWithEntityRead]
    pagination: PaginationRead
    summary: NotificationSummaryRead


class NotificationStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    unread: int
    read: int
    recent: int
    by_type: dict[str, int] = Field(default_factory=dict)


class UnreadCountRead(BaseModel):
    count: int


class NotificationUpdateResponse(BaseModel):
    message: str
    updated: int


class NotificationBulkDeleteRequest(BaseModel):
    """Payload used to delete a batch of notifications."""

    notification_ids: list[str] = Field(..., min_length=1)

    def unique_ids(self) -> list[str]:
        """Return the identifiers without duplicates, preserving order."""

        return list(dict.fromkeys(self.notification_ids))


__all__ = [
    "EntityPreviewRead",
    "NotificationBulkDeleteRequest",
    "NotificationPageRead",
    "NotificationRead",
    "NotificationStatsRead",
    "NotificationSummaryRead",
    "NotificationUpdateResponse",
    "NotificationWithEntityRead",
    "OrganizationNotificationPageRead",
    "PaginationRead",
    "RecentNotificationsRead",
    "UnreadCountRead",
]
