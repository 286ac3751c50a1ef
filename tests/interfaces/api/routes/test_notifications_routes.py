"""Integration tests for the notification endpoints."""

from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from taskpilot.application.use_cases.notifications import create_notification
from taskpilot.domain.entities import Notification, NotificationPriority, NotificationType
from taskpilot.infrastructure.database import get_db
from taskpilot.main import create_app
from taskpilot.utils import days_ago

BOB = {"X-User-Id": "user-bob"}


@pytest.fixture()
def client(session_factory):
    """Return a test client whose requests use the per-test database."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture()
def notify(db_session):
    def _notify(user_id="user-bob", **overrides):
        values = dict(
            id=None,
            user_id=user_id,
            type=NotificationType.TASK_ASSIGNED,
            title="Task Assigned",
            message='Alice assigned you to task "Write docs"',
            organization_id="org-1",
            entity_type="Task",
            entity_id="task-1",
            action_url="/tasks/task-1",
            created_by="user-alice",
        )
        values.update(overrides)
        return create_notification(db_session, Notification(**values))

    return _notify


def test_requests_without_user_header_are_rejected(client):
    response = client.get("/notifications/")

    assert response.status_code == 401


def test_list_notifications(client, seeded, notify):
    notify()
    notify(type=NotificationType.MENTION, title="You were mentioned")
    notify(user_id="user-carol")

    response = client.get("/notifications/", params={"limit": 1}, headers=BOB)

    assert response.status_code == 200
    body = response.json()
    assert len(body["notifications"]) == 1
    assert body["pagination"] == {
        "current_page": 1,
        "total_pages": 2,
        "total_count": 2,
        "has_next_page": True,
        "has_prev_page": False,
    }
    assert body["notifications"][0]["user_id"] == "user-bob"


def test_list_rejects_negative_page(client):
    response = client.get("/notifications/", params={"page": -1}, headers=BOB)

    assert response.status_code == 400


def test_list_uses_organization_header(client, seeded, notify):
    notify()
    notify(organization_id="org-2")

    response = client.get(
        "/notifications/", headers={**BOB, "X-Organization-Id": "org-2"}
    )

    assert [n["organization_id"] for n in response.json()["notifications"]] == ["org-2"]


def test_unread_count_and_mark_read(client, seeded, notify):
    first = notify()
    notify()

    assert client.get("/notifications/unread-count", headers=BOB).json() == {"count": 2}

    response = client.patch(f"/notifications/{first.id}/read", headers=BOB)
    assert response.json() == {"message": "Notification marked as read", "updated": 1}
    again = client.patch(f"/notifications/{first.id}/read", headers=BOB)
    assert again.json()["updated"] == 0

    assert client.get("/notifications/unread-count", headers=BOB).json() == {"count": 1}

    response = client.patch("/notifications/mark-all-read", headers=BOB)
    assert response.json()["updated"] == 1


def test_recent_notifications(client, seeded, notify):
    notify(title="fresh")
    notify(title="stale", created_at=days_ago(9))

    body = client.get("/notifications/recent", headers=BOB).json()

    assert body["count"] == 1
    assert body["notifications"][0]["title"] == "fresh"


def test_stats_summary(client, seeded, notify):
    read = notify()
    notify(type=NotificationType.SYSTEM, title="System Notification")
    client.patch(f"/notifications/{read.id}/read", headers=BOB)

    body = client.get("/notifications/stats/summary", headers=BOB).json()

    assert body == {
        "total": 2,
        "unread": 1,
        "read": 1,
        "recent": 2,
        "by_type": {"TASK_ASSIGNED": 1, "SYSTEM": 1},
    }


def test_list_by_type(client, seeded, notify):
    notify()
    mention = notify(type=NotificationType.MENTION)

    body = client.get("/notifications/by-type/MENTION", headers=BOB).json()

    assert [n["id"] for n in body["notifications"]] == [mention.id]
    assert client.get("/notifications/by-type/NOPE", headers=BOB).status_code == 422


def test_get_notification_is_owner_scoped(client, seeded, notify):
    notification = notify()

    assert client.get(f"/notifications/{notification.id}", headers=BOB).status_code == 200
    response = client.get(
        f"/notifications/{notification.id}", headers={"X-User-Id": "user-carol"}
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Notification not found"


def test_delete_notification(client, seeded, notify):
    notification = notify()

    other = client.delete(
        f"/notifications/{notification.id}", headers={"X-User-Id": "user-carol"}
    )
    assert other.status_code == 204
    assert client.get(f"/notifications/{notification.id}", headers=BOB).status_code == 200

    assert client.delete(f"/notifications/{notification.id}", headers=BOB).status_code == 204
    assert client.get(f"/notifications/{notification.id}", headers=BOB).status_code == 404


def test_bulk_delete(client, seeded, notify):
    mine = notify()
    theirs = notify(user_id="user-carol")

    response = client.request(
        "DELETE",
        "/notifications/bulk",
        json={"notification_ids": [mine.id, theirs.id, mine.id]},
        headers=BOB,
    )

    assert response.status_code == 204
    assert client.get(f"/notifications/{mine.id}", headers=BOB).status_code == 404
    carol = {"X-User-Id": "user-carol"}
    assert client.get(f"/notifications/{theirs.id}", headers=carol).status_code == 200


def test_bulk_delete_requires_ids(client):
    response = client.request(
        "DELETE", "/notifications/bulk", json={"notification_ids": []}, headers=BOB
    )

    assert response.status_code == 422


def test_user_organization_feed(client, seeded, notify):
    notify(priority=NotificationPriority.HIGH)
    notify(
        type=NotificationType.PROJECT_UPDATED,
        entity_type="Project",
        entity_id="proj-1",
        created_at=days_ago(2),
    )
    notify(organization_id="org-2")

    response = client.get("/notifications/user/user-bob/organization/org-1", headers=BOB)

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total_count"] == 2
    assert body["summary"]["unread"] == 2
    assert body["summary"]["by_priority"] == {"HIGH": 1, "MEDIUM": 1}
    first = body["notifications"][0]
    assert first["entity"]["name"] == "Write docs"
    assert first["entity"]["parent"]["name"] == "Launch"


def test_user_organization_feed_date_filters(client, seeded, notify):
    notify()
    notify(created_at=days_ago(5))
    start = (days_ago(1) - timedelta(hours=1)).isoformat()

    response = client.get(
        "/notifications/user/user-bob/organization/org-1",
        params={"start_date": start},
        headers=BOB,
    )

    assert response.json()["pagination"]["total_count"] == 1


def test_user_organization_feed_rejects_bad_dates(client, seeded):
    response = client.get(
        "/notifications/user/user-bob/organization/org-1",
        params={"end_date": "yesterday"},
        headers=BOB,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid end_date format"


def test_user_organization_feed_is_private(client, seeded):
    response = client.get(
        "/notifications/user/user-carol/organization/org-1", headers=BOB
    )

    assert response.status_code == 403
