"""Endpoints for reading and managing a user's notifications."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from taskpilot.application.use_cases.notifications import (
    InvalidPaginationError,
    NotificationNotFoundError,
    delete_notification as delete_notification_uc,
    delete_notifications as delete_notifications_uc,
    get_notification as get_notification_uc,
    get_notification_stats as get_notification_stats_uc,
    get_unread_count as get_unread_count_uc,
    list_notifications as list_notifications_uc,
    list_notifications_by_type as list_notifications_by_type_uc,
    list_recent_notifications as list_recent_notifications_uc,
    list_user_organization_notifications as list_user_organization_notifications_uc,
    mark_all_notifications_read as mark_all_notifications_read_uc,
    mark_notification_read as mark_notification_read_uc,
    normalize_pagination,
)
from taskpilot.domain.entities import (
    Notification,
    NotificationFilters,
    NotificationPage,
    NotificationPriority,
    NotificationType,
    Pagination,
)
from taskpilot.infrastructure.database import get_db
from taskpilot.interfaces.api.dependencies import get_current_user_id, get_organization_id
from taskpilot.interfaces.api.schemas import (
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

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(notification)


def _pagination_to_schema(pagination: Pagination) -> PaginationRead:
    return PaginationRead.model_validate(pagination)


def _page_to_schema(page: NotificationPage) -> NotificationPageRead:
    return NotificationPageRead(
        notifications=[_notification_to_schema(item) for item in page.notifications],
        pagination=_pagination_to_schema(page.pagination),
    )


def _strict_pagination(page: int, limit: int) -> tuple[int, int]:
    try:
        return normalize_pagination(page, limit, strict=True)
    except InvalidPaginationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _parse_date(value: str | None, field_name: str) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {field_name} format",
        ) from exc


@router.get("/", response_model=NotificationPageRead)
def list_notifications(
    is_read: bool | None = None,
    type: NotificationType | None = None,
    organization_id: str | None = None,
    page: int = 1,
    limit: int = 20,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    context_organization_id: str | None = Depends(get_organization_id),
) -> NotificationPageRead:
    """Return a page of the user's notifications."""

    page, limit = _strict_pagination(page, limit)
    filters = NotificationFilters(
        is_read=is_read,
        type=type,
        organization_id=organization_id or context_organization_id,
    )
    result = list_notifications_uc(db, user_id, filters, page=page, limit=limit)
    return _page_to_schema(result)


@router.get("/unread-count", response_model=UnreadCountRead)
def read_unread_count(
    organization_id: str | None = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    context_organization_id: str | None = Depends(get_organization_id),
) -> UnreadCountRead:
    count = get_unread_count_uc(
        db, user_id=user_id, organization_id=organization_id or context_organization_id
    )
    return UnreadCountRead(count=count)


@router.get("/recent", response_model=RecentNotificationsRead)
def list_recent_notifications(
    limit: int = 10,
    organization_id: str | None = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    context_organization_id: str | None = Depends(get_organization_id),
) -> RecentNotificationsRead:
    """Return notifications from the last seven days."""

    result = list_recent_notifications_uc(
        db,
        user_id,
        organization_id=organization_id or context_organization_id,
        limit=limit,
    )
    notifications = [_notification_to_schema(item) for item in result.notifications]
    return RecentNotificationsRead(notifications=notifications, count=len(notifications))


@router.get("/stats/summary", response_model=NotificationStatsRead)
def read_notification_stats(
    organization_id: str | None = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    context_organization_id: str | None = Depends(get_organization_id),
) -> NotificationStatsRead:
    stats = get_notification_stats_uc(
        db, user_id=user_id, organization_id=organization_id or context_organization_id
    )
    return NotificationStatsRead.model_validate(stats)


@router.get("/by-type/{notification_type}", response_model=NotificationPageRead)
def list_notifications_by_type(
    notification_type: NotificationType,
    page: int = 1,
    limit: int = 20,
    organization_id: str | None = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    context_organization_id: str | None = Depends(get_organization_id),
) -> NotificationPageRead:
    filters = NotificationFilters(organization_id=organization_id or context_organization_id)
    result = list_notifications_by_type_uc(
        db, user_id, notification_type, filters, page=page, limit=limit
    )
    return _page_to_schema(result)


@router.get(
    "/user/{target_user_id}/organization/{organization_id}",
    response_model=OrganizationNotificationPageRead,
)
def list_user_organization_notifications(
    target_user_id: str,
    organization_id: str,
    is_read: bool | None = None,
    type: NotificationType | None = None,
    priority: NotificationPriority | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    page: int = 1,
    limit: int = 20,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> OrganizationNotificationPageRead:
    """Return the user's notifications in one organization with entity previews."""

    if target_user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Cannot read another user's notifications",
        )
    page, limit = _strict_pagination(page, limit)
    filters = NotificationFilters(
        is_read=is_read,
        type=type,
        priority=priority,
        start_date=_parse_date(start_date, "start_date"),
        end_date=_parse_date(end_date, "end_date"),
    )
    result = list_user_organization_notifications_uc(
        db,
        user_id=target_user_id,
        organization_id=organization_id,
        filters=filters,
        page=page,
        limit=limit,
    )
    return OrganizationNotificationPageRead(
        notifications=[
            NotificationWithEntityRead(
                **_notification_to_schema(item.notification).model_dump(),
                entity=EntityPreviewRead.model_validate(item.entity) if item.entity else None,
            )
            for item in result.notifications
        ],
        pagination=_pagination_to_schema(result.pagination),
        summary=NotificationSummaryRead.model_validate(result.summary),
    )


@router.patch("/mark-all-read", response_model=NotificationUpdateResponse)
def mark_all_notifications_read(
    organization_id: str | None = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    context_organization_id: str | None = Depends(get_organization_id),
) -> NotificationUpdateResponse:
    updated = mark_all_notifications_read_uc(
        db, user_id=user_id, organization_id=organization_id or context_organization_id
    )
    return NotificationUpdateResponse(
        message="All notifications marked as read", updated=updated
    )


@router.delete("/bulk", status_code=status.HTTP_204_NO_CONTENT)
def delete_notifications(
    payload: NotificationBulkDeleteRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    """Delete several notifications; ids owned by other users are ignored."""

    delete_notifications_uc(db, payload.unique_ids(), user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{notification_id}", response_model=NotificationRead)
def read_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationRead:
    try:
        notification = get_notification_uc(db, notification_id, user_id=user_id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _notification_to_schema(notification)


@router.patch("/{notification_id}/read", response_model=NotificationUpdateResponse)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationUpdateResponse:
    updated = mark_notification_read_uc(db, notification_id, user_id=user_id)
    return NotificationUpdateResponse(message="Notification marked as read", updated=updated)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    delete_notification_uc(db, notification_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
