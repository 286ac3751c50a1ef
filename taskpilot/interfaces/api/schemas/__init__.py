from .notification import (
    EntityPreviewRead,
    NotificationBulkDeleteRequest,
    NotificationPageRead,
    NotificationRead,
    NotificationStatsRead,
    NotificationSummaryRead,
    NotificationUpdateResponse,
    NotificationWithEntityRead,
    OrganizationNotificationPageRead,
    PaginationRead,
    RecentNotificationsRead,
    UnreadCountRead,
)

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
