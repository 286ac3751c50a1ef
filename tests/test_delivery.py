"""Tests for notification rendering and per-recipient delivery."""

from __future__ import annotations

import pytest

from taskpilot.application.use_cases.notifications import NotificationDelivery
from taskpilot.application.use_cases.notifications.delivery import render
from taskpilot.application.use_cases.notifications.messages import default_action_url
from taskpilot.domain.entities import (
    Actor,
    DispatchEvent,
    EntityPreview,
    NotificationPolicy,
    NotificationPriority,
    NotificationType,
)


class RecordingWriter:
    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.created = []

    async def create(self, notification):
        if notification.user_id in self.failing:
            raise RuntimeError(f"cannot store notification for {notification.user_id}")
        self.created.append(notification)
        return notification


class RecordingMailer:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls = []

    async def _record(self, name, *args):
        self.calls.append((name, *args))
        if self.fail:
            raise RuntimeError("smtp down")
        return 1

    async def send_task_assigned_email(self, task_id, assignee_ids, actor_id):
        return await self._record("assigned", task_id, list(assignee_ids), actor_id)

    async def send_task_status_changed_email(self, task_id, old_status_id=None, actor_id=None):
        return await self._record("status", task_id, old_status_id, actor_id)

    async def send_task_commented_email(self, task_id, comment_id, actor_id, recipient_ids):
        return await self._record("commented", task_id, comment_id, actor_id)

    async def send_project_created_email(self, project_id, actor_id, recipient_ids):
        return await self._record("project_created", project_id)

    async def send_project_updated_email(self, project_id, actor_id, recipient_ids):
        return await self._record("project_updated", project_id)

    async def send_mention_email(self, entity_type, entity_id, mentioned_user_id, actor_id):
        return await self._record("mention", entity_type, entity_id, mentioned_user_id)

    async def send_system_notification_email(self, user_id, title, message, action_url=None):
        return await self._record("system", user_id, title, message, action_url)

    async def send_due_date_reminder_email(self, task_id):
        return await self._record("due", task_id)


class PreviewDetails:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.lookups = []

    async def resolve(self, entity_type, entity_id):
        self.lookups.append((entity_type, entity_id))
        if self.fail:
            raise RuntimeError("preview query failed")
        return EntityPreview(id=entity_id, type="task", name="Fix bug")


def commented_event():
    return DispatchEvent(
        actor=Actor(id="U0", first_name="Ann", last_name="Lee"),
        result_snapshot={"id": "C1", "taskId": "T1", "content": "hi"},
        notification=NotificationPolicy(
            type=NotificationType.TASK_COMMENTED, entity_type="TaskComment"
        ),
    )


def assigned_event():
    return DispatchEvent(
        actor=Actor(id="U0", first_name="Ann", last_name="Lee"),
        request_snapshot={"assigneeIds": ["U1", "U2"]},
        result_snapshot={"id": "T1", "title": "Fix bug"},
        notification=NotificationPolicy(
            type=NotificationType.TASK_ASSIGNED, entity_type="Task"
        ),
    )


@pytest.mark.anyio
async def test_assigned_scenario_creates_one_notification_per_recipient():
    writer = RecordingWriter()
    mailer = RecordingMailer()

    report = await NotificationDelivery(writer, mailer).deliver(
        assigned_event(), ("U1", "U2"), organization_id="O1"
    )

    assert report.notified == ["U1", "U2"]
    assert report.failed == []
    assert mailer.calls == [("assigned", "T1", ["U1", "U2"], "U0")]
    assert [n.user_id for n in writer.created] == ["U1", "U2"]
    for notification in writer.created:
        assert notification.type is NotificationType.TASK_ASSIGNED
        assert notification.title == "Task Assigned"
        assert notification.message == 'Ann Lee assigned you to task "Fix bug"'
        assert notification.action_url == "/tasks/T1"
        assert notification.priority is NotificationPriority.MEDIUM
        assert notification.organization_id == "O1"
        assert notification.entity_id == "T1"
        assert notification.created_by == "U0"


@pytest.mark.anyio
async def test_one_failing_writer_does_not_block_the_others(caplog):
    writer = RecordingWriter(failing={"U1"})

    with caplog.at_level("ERROR"):
        report = await NotificationDelivery(writer).deliver(
            assigned_event(), ("U1", "U2"), organization_id=None
        )

    assert report.notified == ["U2"]
    assert report.failed == ["U1"]
    assert [n.user_id for n in writer.created] == ["U2"]
    assert "Failed to create notification for user U1" in caplog.text


@pytest.mark.anyio
async def test_email_failure_still_creates_notifications():
    writer = RecordingWriter()

    report = await NotificationDelivery(writer, RecordingMailer(fail=True)).deliver(
        assigned_event(), ("U1", "U2")
    )

    assert report.emails_failed == 1
    assert report.notified == ["U1", "U2"]


@pytest.mark.anyio
async def test_mention_sends_one_email_per_recipient():
    mailer = RecordingMailer()
    event = DispatchEvent(
        actor=Actor(id="U0"),
        result_snapshot={"id": "C1"},
        notification=NotificationPolicy(
            type=NotificationType.MENTION, entity_type="TaskComment"
        ),
    )

    await NotificationDelivery(RecordingWriter(), mailer).deliver(event, ("U1", "U2"))

    assert mailer.calls == [
        ("mention", "TaskComment", "C1", "U1"),
        ("mention", "TaskComment", "C1", "U2"),
    ]


@pytest.mark.anyio
async def test_invitation_has_no_email_branch():
    mailer = RecordingMailer()
    writer = RecordingWriter()
    event = DispatchEvent(
        actor=Actor(id="U0"),
        request_snapshot={"userId": "U3"},
        result_snapshot={"id": "W1", "name": "Design"},
        notification=NotificationPolicy(
            type=NotificationType.WORKSPACE_INVITED, entity_type="Workspace"
        ),
    )

    report = await NotificationDelivery(writer, mailer).deliver(event, ("U3",))

    assert mailer.calls == []
    assert report.notified == ["U3"]
    assert writer.created[0].action_url == "/workspaces/W1"


@pytest.mark.anyio
async def test_missing_task_id_skips_the_email():
    mailer = RecordingMailer()
    event = DispatchEvent(
        actor=Actor(id="U0"),
        result_snapshot={},
        notification=NotificationPolicy(
            type=NotificationType.TASK_STATUS_CHANGED, entity_type="Task"
        ),
    )

    await NotificationDelivery(RecordingWriter(), mailer).deliver(event, ("U1",))

    assert mailer.calls == []


@pytest.mark.anyio
async def test_no_recipients_is_a_no_op():
    writer = RecordingWriter()

    report = await NotificationDelivery(writer, RecordingMailer()).deliver(assigned_event(), ())

    assert report.notified == []
    assert writer.created == []


def test_render_uses_policy_overrides_and_system_actor():
    event = DispatchEvent(
        actor=None,
        result_snapshot={"id": "T5", "title": "Pay invoices"},
        notification=NotificationPolicy(
            type=NotificationType.TASK_DUE_SOON,
            entity_type="Task",
            action_url="/custom",
        ),
    )

    rendered = render(event)

    assert rendered.title == "Task Due Soon"
    assert rendered.message == 'Task "Pay invoices" is due soon'
    assert rendered.action_url == "/custom"
    assert rendered.entity_id == "T5"


def test_render_custom_type_falls_back_to_generic_text():
    event = DispatchEvent(
        actor=None,
        result_snapshot={"id": "S1"},
        notification=NotificationPolicy(
            type=NotificationType.SPRINT_STARTED, entity_type="Sprint"
        ),
    )

    rendered = render(event)

    assert rendered.title == "Notification"
    assert rendered.message == "System performed an action"
    assert rendered.action_url == "/"


@pytest.mark.parametrize(
    ("entity_type", "entity_id", "expected"),
    [
        ("Task", "T1", "/tasks/T1"),
        ("Project", "P1", "/projects/P1"),
        ("task_comment", "T1", "/tasks/T1#comments"),
        ("Organization", "O1", "/organizations/O1"),
        ("Sprint", "S1", "/"),
        ("Task", None, "/"),
        (None, "X", "/"),
    ],
)
def test_default_action_url(entity_type, entity_id, expected):
    assert default_action_url(entity_type, entity_id) == expected


@pytest.mark.anyio
async def test_comment_message_names_the_task():
    writer = RecordingWriter()
    details = PreviewDetails()

    await NotificationDelivery(writer, entity_details=details).deliver(
        commented_event(), ("U1",)
    )

    assert details.lookups == [("Task", "T1")]
    assert writer.created[0].message == 'Ann Lee commented on task "Fix bug"'


@pytest.mark.anyio
async def test_snapshot_title_skips_the_lookup():
    details = PreviewDetails()

    await NotificationDelivery(RecordingWriter(), entity_details=details).deliver(
        assigned_event(), ("U1",)
    )

    assert details.lookups == []


@pytest.mark.anyio
async def test_failed_lookup_still_delivers(caplog):
    writer = RecordingWriter()

    with caplog.at_level("WARNING"):
        report = await NotificationDelivery(
            writer, entity_details=PreviewDetails(fail=True)
        ).deliver(commented_event(), ("U1",))

    assert report.notified == ["U1"]
    assert "Could not load Task T1" in caplog.text


def test_render_quotes_the_given_subject():
    rendered = render(commented_event(), {"title": "Fix bug"})

    assert rendered.message == 'Ann Lee commented on task "Fix bug"'
    assert rendered.entity_id == "C1"


@pytest.mark.anyio
async def test_system_message_is_not_replaced_by_a_lookup():
    writer = RecordingWriter()
    details = PreviewDetails()
    event = DispatchEvent(
        actor=None,
        result_snapshot={"id": "T1", "message": "Maintenance tonight"},
        notification=NotificationPolicy(
            type=NotificationType.SYSTEM, entity_type="Task", notify_user_ids=["U1"]
        ),
    )

    await NotificationDelivery(writer, entity_details=details).deliver(event, ("U1",))

    assert details.lookups == []
    assert writer.created[0].message == "Maintenance tonight"
