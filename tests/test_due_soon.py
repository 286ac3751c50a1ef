"""Tests for the due-date reminder sweep."""

from __future__ import annotations

from datetime import timedelta

import pytest

from taskpilot.application.use_cases.notifications import dispatch_due_soon_reminders
from taskpilot.application.use_cases.notifications.due_soon import build_due_soon_event
from taskpilot.domain.entities import DueTask, NotificationPriority, NotificationType
from taskpilot.infrastructure import models
from taskpilot.utils import now_in_app_naive_datetime, now_in_app_timezone

pytestmark = pytest.mark.anyio


class RecordingDispatcher:
    def __init__(self):
        self.events = []

    def dispatch(self, event):
        self.events.append(event)


class ReminderMailer:
    def __init__(self, *, fail=False):
        self.fail = fail
        self.task_ids = []

    async def send_due_date_reminder_email(self, task_id):
        self.task_ids.append(task_id)
        if self.fail:
            raise RuntimeError("sendgrid unavailable")
        return 1


def add_task(session, task_id, *, hours, assignee=True, **values):
    task = models.TaskModel(
        id=task_id,
        project_id="proj-1",
        title=task_id,
        due_date=now_in_app_naive_datetime() + timedelta(hours=hours),
        **values,
    )
    if assignee:
        task.assignees = [session.get(models.UserModel, "user-bob")]
    session.add(task)
    session.commit()


async def test_only_open_assigned_tasks_in_window_get_reminders(db_session, seeded):
    add_task(db_session, "done-task", hours=2, status_id="status-done")
    add_task(db_session, "completed-task", hours=2, completed_at=now_in_app_naive_datetime())
    add_task(db_session, "unassigned-task", hours=2, assignee=False)
    add_task(db_session, "later-task", hours=48)
    add_task(db_session, "overdue-task", hours=-1)
    add_task(db_session, "no-status-task", hours=5)
    dispatcher = RecordingDispatcher()

    count = await dispatch_due_soon_reminders(db_session, dispatcher, window_hours=24)

    assert count == 2
    assert [event.returned("id") for event in dispatcher.events] == [
        "task-1",
        "no-status-task",
    ]
    event = dispatcher.events[0]
    assert event.actor is None
    assert event.notification.type is NotificationType.TASK_DUE_SOON
    assert event.notification.priority is NotificationPriority.HIGH
    assert event.organization_id == "org-1"


async def test_reminder_emails_are_best_effort(db_session, seeded, caplog):
    add_task(db_session, "second-task", hours=4)
    mailer = ReminderMailer(fail=True)
    dispatcher = RecordingDispatcher()

    with caplog.at_level("ERROR"):
        count = await dispatch_due_soon_reminders(
            db_session, dispatcher, window_hours=24, mailer=mailer
        )

    assert count == 2
    assert mailer.task_ids == ["task-1", "second-task"]
    assert len(dispatcher.events) == 2
    assert "Failed to send due date reminder email" in caplog.text


async def test_empty_window(db_session, seeded):
    dispatcher = RecordingDispatcher()

    count = await dispatch_due_soon_reminders(
        db_session,
        dispatcher,
        now=now_in_app_timezone() + timedelta(days=30),
        window_hours=1,
    )

    assert count == 0
    assert dispatcher.events == []


def test_due_soon_event_shape():
    due = now_in_app_timezone()
    event = build_due_soon_event(DueTask(id="T1", title="Pay", due_date=due, organization_id="O1"))

    assert event.result_snapshot == {"id": "T1", "title": "Pay", "dueDate": due.isoformat()}
    assert event.notification.entity_type == "Task"
    assert event.notification.entity_id == "T1"
    assert event.notification.organization_id == "O1"
    assert event.activity is None
