"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from taskpilot.domain.entities import (
    Notification,
    NotificationFilters,
    NotificationPriority,
    NotificationType,
)
from taskpilot.infrastructure.models import NotificationModel
from taskpilot.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide CRUD and aggregate queries for :class:`Notification` objects.

    Every read and write is scoped by the owning ``user_id``; operations on
    identifiers that belong to somebody else simply match zero rows.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get_for_user(self, notification_id: str, *, user_id: str) -> Notification | None:
        model = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
            )
            .one_or_none()
        )
        if model is None:
            return None
        return self._to_entity(model)

    def list(
        self,
        user_id: str,
        filters: NotificationFilters,
        *,
        offset: int = 0,
        limit: int | None = 20,
        unread_first: bool = False,
    ) -> Sequence[Notification]:
        query = self._filtered(user_id, filters)
        if unread_first:
            query = query.order_by(
                NotificationModel.is_read.asc(),
                NotificationModel.created_at.desc(),
                NotificationModel.id.desc(),
            )
        else:
            query = query.order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def count(self, user_id: str, filters: NotificationFilters) -> int:
        return self._filtered(user_id, filters).count()

    def count_created_since(
        self, user_id: str, filters: NotificationFilters, since: datetime
    ) -> int:
        return (
            self._filtered(user_id, filters)
            .filter(NotificationModel.created_at >= ensure_app_naive_datetime(since))
            .count()
        )

    def count_by_type(self, user_id: str, filters: NotificationFilters) -> dict[str, int]:
        return self._grouped_counts(NotificationModel.type, user_id, filters)

    def count_by_priority(
        self, user_id: str, filters: NotificationFilters
    ) -> dict[str, int]:
        return self._grouped_counts(NotificationModel.priority, user_id, filters)

    def mark_as_read(self, notification_id: str, *, user_id: str) -> int:
        """Mark one unread notification as read; returns the affected row count."""

        return self._mark_read(
            self.session.query(NotificationModel).filter(
                NotificationModel.id == notification_id,
                NotificationModel.user_id == user_id,
                NotificationModel.is_read.is_(False),
            )
        )

    def mark_all_as_read(self, user_id: str, *, organization_id: str | None = None) -> int:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id,
            NotificationModel.is_read.is_(False),
        )
        if organization_id:
            query = query.filter(NotificationModel.organization_id == organization_id)
        return self._mark_read(query)

    def delete(self, notification_id: str, *, user_id: str) -> int:
        return self.delete_many([notification_id], user_id=user_id)

    def delete_many(self, notification_ids: Sequence[str], *, user_id: str) -> int:
        ids = [notification_id for notification_id in notification_ids if notification_id]
        if not ids:
            return 0
        deleted = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id.in_(ids),
                NotificationModel.user_id == user_id,
            )
            .delete(synchronize_session=False)
        )
        self.session.commit()
        return deleted

    def _mark_read(self, query: Query) -> int:
        updated = query.update(
            {
                NotificationModel.is_read: True,
                NotificationModel.read_at: ensure_app_naive_datetime(
                    now_in_app_timezone()
                ),
            },
            synchronize_session=False,
        )
        self.session.commit()
        return updated

    def _grouped_counts(
        self, column, user_id: str, filters: NotificationFilters
    ) -> dict[str, int]:
        query = self._filtered(user_id, filters).with_entities(
            column, func.count(NotificationModel.id)
        )
        return {str(key): count for key, count in query.group_by(column).all()}

    def _filtered(self, user_id: str, filters: NotificationFilters) -> Query:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )
        if filters.is_read is not None:
            query = query.filter(NotificationModel.is_read.is_(filters.is_read))
        if filters.type is not None:
            query = query.filter(NotificationModel.type == NotificationType(filters.type).value)
        if filters.priority is not None:
            query = query.filter(
                NotificationModel.priority == NotificationPriority(filters.priority).value
            )
        if filters.organization_id:
            query = query.filter(NotificationModel.organization_id == filters.organization_id)
        if filters.start_date is not None:
            query = query.filter(
                NotificationModel.created_at >= ensure_app_naive_datetime(filters.start_date)
            )
        if filters.end_date is not None:
            query = query.filter(
                NotificationModel.created_at <= ensure_app_naive_datetime(filters.end_date)
            )
        return query

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        if notification.id:
            model.id = notification.id
        model.user_id = notification.user_id
        model.organization_id = notification.organization_id
        model.type = NotificationType(notification.type).value
        model.priority = NotificationPriority(
            notification.priority or NotificationPriority.MEDIUM
        ).value
        model.title = notification.title
        model.message = notification.message
        model.entity_type = notification.entity_type
        model.entity_id = notification.entity_id
        model.action_url = notification.action_url
        model.created_by = notification.created_by
        model.is_read = bool(notification.is_read)
        model.read_at = ensure_app_naive_datetime(notification.read_at)
        model.created_at = (
            ensure_app_naive_datetime(notification.created_at)
            or ensure_app_naive_datetime(now_in_app_timezone())
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=NotificationType(model.type),
            title=model.title,
            message=model.message,
            priority=NotificationPriority(model.priority),
            organization_id=model.organization_id,
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            action_url=model.action_url,
            created_by=model.created_by,
            is_read=bool(model.is_read),
            read_at=ensure_app_timezone(model.read_at),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["NotificationRepository"]
