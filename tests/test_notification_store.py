"""Tests for the notification store use cases."""

from __future__ import annotations

from datetime import timedelta

import pytest

from taskpilot.application.use_cases.notifications import (
    InvalidPaginationError,
    NotificationNotFoundError,
    create_notification,
    delete_notification,
    delete_notifications,
    get_notification,
    get_notification_stats,
    get_unread_count,
    list_notifications,
    list_notifications_by_type,
    list_recent_notifications,
    list_user_organization_notifications,
    mark_all_notifications_read,
    mark_notification_read,
    normalize_pagination,
)
from taskpilot.domain.entities import (
    Notification,
    NotificationFilters,
    NotificationPriority,
    NotificationType,
)
from taskpilot.utils import days_ago, now_in_app_timezone


def add_notification(session, user_id="U1", **overrides):
    values = dict(
        id=None,
        user_id=user_id,
        type=NotificationType.TASK_ASSIGNED,
        title="Task Assigned",
        message="Someone assigned you",
    )
    values.update(overrides)
    return create_notification(session, Notification(**values))


@pytest.mark.parametrize(
    ("page", "limit", "expected"),
    [
        (0, 500, (1, 100)),
        (None, None, (1, 20)),
        (-3, 0, (1, 20)),
        (2, -5, (2, 1)),
        (4, 35, (4, 35)),
    ],
)
def test_normalize_pagination_clamps(page, limit, expected):
    assert normalize_pagination(page, limit) == expected


def test_normalize_pagination_strict_rejects_negative_page():
    with pytest.raises(InvalidPaginationError):
        normalize_pagination(-1, 10, strict=True)
    assert normalize_pagination(0, 10, strict=True) == (1, 10)


def test_create_notification_defaults(db_session):
    notification = add_notification(db_session, priority=None)

    assert notification.id
    assert notification.priority is NotificationPriority.MEDIUM
    assert notification.is_read is False
    assert notification.read_at is None
    assert notification.created_at is not None


def test_list_notifications_newest_first_with_clamped_pagination(db_session):
    now = now_in_app_timezone()
    for offset in range(3):
        add_notification(
            db_session, title=f"n{offset}", created_at=now - timedelta(minutes=offset)
        )
    add_notification(db_session, user_id="U2")

    page = list_notifications(db_session, "U1", page=0, limit=500)

    assert [n.title for n in page.notifications] == ["n0", "n1", "n2"]
    pagination = page.pagination
    assert (pagination.current_page, pagination.total_pages, pagination.total_count) == (1, 1, 3)
    assert pagination.has_next_page is False
    assert pagination.has_prev_page is False


def test_list_notifications_pages(db_session):
    for index in range(5):
        add_notification(db_session, title=f"n{index}")

    page = list_notifications(db_session, "U1", page=2, limit=2)

    assert len(page.notifications) == 2
    assert page.pagination.total_pages == 3
    assert page.pagination.has_next_page is True
    assert page.pagination.has_prev_page is True


def test_organization_scoped_list_puts_unread_first(db_session):
    now = now_in_app_timezone()
    old_unread = add_notification(
        db_session, organization_id="O1", created_at=now - timedelta(hours=2)
    )
    new_read = add_notification(db_session, organization_id="O1", created_at=now)
    mark_notification_read(db_session, new_read.id, user_id="U1")
    add_notification(db_session, organization_id="O2")

    page = list_notifications(db_session, "U1", NotificationFilters(organization_id="O1"))

    assert [n.id for n in page.notifications] == [old_unread.id, new_read.id]


def test_filters_by_read_state_and_type(db_session):
    mention = add_notification(db_session, type=NotificationType.MENTION)
    add_notification(db_session)
    mark_notification_read(db_session, mention.id, user_id="U1")

    unread = list_notifications(db_session, "U1", NotificationFilters(is_read=False))
    mentions = list_notifications_by_type(db_session, "U1", "MENTION")

    assert [n.type for n in unread.notifications] == [NotificationType.TASK_ASSIGNED]
    assert [n.id for n in mentions.notifications] == [mention.id]


def test_by_type_rejects_unknown_type(db_session):
    with pytest.raises(ValueError, match="Unknown notification type"):
        list_notifications_by_type(db_session, "U1", "NOT_A_TYPE")


def test_recent_notifications_cover_last_seven_days(db_session):
    add_notification(db_session, title="fresh")
    add_notification(db_session, title="stale", created_at=days_ago(8))

    recent = list_recent_notifications(db_session, "U1", limit=500)

    assert [n.title for n in recent.notifications] == ["fresh"]


def test_get_notification_is_owner_scoped(db_session):
    notification = add_notification(db_session)

    assert get_notification(db_session, notification.id, user_id="U1").id == notification.id
    with pytest.raises(NotificationNotFoundError):
        get_notification(db_session, notification.id, user_id="U2")


def test_mark_read_is_idempotent_and_keeps_read_at(db_session):
    notification = add_notification(db_session)

    assert mark_notification_read(db_session, notification.id, user_id="U1") == 1
    first_read_at = get_notification(db_session, notification.id, user_id="U1").read_at
    assert mark_notification_read(db_session, notification.id, user_id="U1") == 0

    stored = get_notification(db_session, notification.id, user_id="U1")
    assert stored.is_read is True
    assert stored.read_at == first_read_at


def test_mark_read_ignores_other_users(db_session):
    notification = add_notification(db_session)

    assert mark_notification_read(db_session, notification.id, user_id="U2") == 0
    assert get_notification(db_session, notification.id, user_id="U1").is_read is False


def test_mark_all_read_scoped_by_organization(db_session):
    add_notification(db_session, organization_id="O1")
    add_notification(db_session, organization_id="O1")
    add_notification(db_session, organization_id="O2")

    assert mark_all_notifications_read(db_session, user_id="U1", organization_id="O1") == 2
    assert get_unread_count(db_session, user_id="U1") == 1
    assert mark_all_notifications_read(db_session, user_id="U1") == 1
    assert get_unread_count(db_session, user_id="U1") == 0


def test_delete_many_ignores_notifications_of_other_users(db_session):
    mine = add_notification(db_session)
    theirs = add_notification(db_session, user_id="U2")

    assert delete_notifications(db_session, [theirs.id], user_id="U1") == 0
    assert delete_notifications(db_session, [mine.id, theirs.id], user_id="U1") == 1
    assert get_notification(db_session, theirs.id, user_id="U2").id == theirs.id


def test_delete_many_requires_identifiers(db_session):
    with pytest.raises(ValueError):
        delete_notifications(db_session, [], user_id="U1")


def test_delete_single_notification(db_session):
    notification = add_notification(db_session)

    assert delete_notification(db_session, notification.id, user_id="U2") == 0
    assert delete_notification(db_session, notification.id, user_id="U1") == 1
    with pytest.raises(NotificationNotFoundError):
        get_notification(db_session, notification.id, user_id="U1")


def test_notification_stats(db_session):
    read = add_notification(db_session)
    add_notification(db_session, type=NotificationType.MENTION)
    add_notification(db_session, type=NotificationType.MENTION, created_at=days_ago(10))
    mark_notification_read(db_session, read.id, user_id="U1")

    stats = get_notification_stats(db_session, user_id="U1")

    assert (stats.total, stats.unread, stats.read, stats.recent) == (3, 2, 1, 2)
    assert stats.by_type == {"TASK_ASSIGNED": 1, "MENTION": 2}


def test_organization_listing_with_entities_and_summary(db_session, seeded):
    bob = seeded.users["bob"]
    add_notification(
        db_session,
        user_id=bob,
        organization_id="org-1",
        entity_type="Task",
        entity_id="task-1",
        priority=NotificationPriority.HIGH,
    )
    read = add_notification(
        db_session,
        user_id=bob,
        organization_id="org-1",
        type=NotificationType.PROJECT_UPDATED,
        entity_type="Project",
        entity_id="proj-1",
    )
    add_notification(
        db_session,
        user_id=bob,
        organization_id="org-1",
        type=NotificationType.SYSTEM,
        entity_type="Spaceship",
        entity_id="x",
    )
    add_notification(db_session, user_id=bob, organization_id="org-2")
    mark_notification_read(db_session, read.id, user_id=bob)

    result = list_user_organization_notifications(
        db_session, user_id=bob, organization_id="org-1", page=1, limit=10
    )

    assert result.pagination.total_count == 3
    assert result.notifications[-1].notification.id == read.id
    entities = {
        item.notification.entity_type: item.entity for item in result.notifications
    }
    assert entities["Task"].name == "Write docs"
    assert entities["Task"].parent == {"id": "proj-1", "name": "Launch", "slug": "launch"}
    assert entities["Project"].parent["name"] == "Engineering"
    assert entities["Spaceship"] is None

    summary = result.summary
    assert (summary.total, summary.unread) == (3, 2)
    assert summary.by_type == {"TASK_ASSIGNED": 1, "PROJECT_UPDATED": 1, "SYSTEM": 1}
    assert summary.by_priority == {"HIGH": 1, "MEDIUM": 2}


def test_organization_listing_filters(db_session):
    add_notification(db_session, organization_id="O1", priority=NotificationPriority.LOW)
    add_notification(
        db_session,
        organization_id="O1",
        priority=NotificationPriority.HIGH,
        created_at=days_ago(3),
    )

    result = list_user_organization_notifications(
        db_session,
        user_id="U1",
        organization_id="O1",
        filters=NotificationFilters(
            priority=NotificationPriority.HIGH, end_date=days_ago(1)
        ),
    )

    assert [item.notification.priority for item in result.notifications] == [
        NotificationPriority.HIGH
    ]
    assert result.summary.total == 1
