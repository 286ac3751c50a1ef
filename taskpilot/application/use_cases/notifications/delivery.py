"""Fan a resolved event out to email and in-app notifications."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from taskpilot.domain.entities import (
    DispatchEvent,
    Notification,
    NotificationPriority,
    NotificationType,
    read_field,
)

from .messages import default_action_url, default_message, default_title
from .ports import EntityDetails, Mailer, NotificationWriter

logger = logging.getLogger(__name__)

SYSTEM_ACTOR_NAME = "System"


@dataclass
class DeliveryReport:
    """Outcome of one delivery; failures are counted, never raised."""

    notified: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    emails_failed: int = 0


@dataclass(frozen=True)
class RenderedNotification:
    title: str
    message: str
    action_url: str
    entity_id: str | None


def render(event: DispatchEvent, subject: Any = None) -> RenderedNotification:
    """Return title, message and action URL for ``event``'s notification policy.

    ``subject`` is the record the default message refers to; it defaults to
    the result snapshot.
    """

    policy = event.notification
    entity_id = event.returned("id") or policy.entity_id
    actor_name = event.actor.display_name if event.actor else SYSTEM_ACTOR_NAME
    if subject is None:
        subject = event.result_snapshot
    return RenderedNotification(
        title=policy.title or default_title(policy.type),
        message=policy.message or default_message(policy.type, actor_name, subject),
        action_url=policy.action_url or default_action_url(policy.entity_type, entity_id),
        entity_id=entity_id,
    )


EmailSends = list[Awaitable[int]]
EmailBranch = Callable[[Mailer, DispatchEvent, Sequence[str], RenderedNotification], EmailSends]


def _task_assigned_email(mailer, event, recipients, rendered) -> EmailSends:
    task_id = event.returned("id")
    if not task_id:
        return []
    return [mailer.send_task_assigned_email(task_id, list(recipients), event.actor_id)]


def _task_status_changed_email(mailer, event, recipients, rendered) -> EmailSends:
    task_id = event.returned("id")
    if not task_id:
        return []
    return [
        mailer.send_task_status_changed_email(
            task_id, event.requested("oldStatusId"), event.actor_id
        )
    ]


def _task_commented_email(mailer, event, recipients, rendered) -> EmailSends:
    comment_id, task_id = event.returned("id"), event.returned("taskId")
    if not (comment_id and task_id):
        return []
    return [
        mailer.send_task_commented_email(task_id, comment_id, event.actor_id, list(recipients))
    ]


def _project_created_email(mailer, event, recipients, rendered) -> EmailSends:
    project_id = event.returned("id")
    if not project_id:
        return []
    return [mailer.send_project_created_email(project_id, event.actor_id, list(recipients))]


def _project_updated_email(mailer, event, recipients, rendered) -> EmailSends:
    project_id = event.returned("id")
    if not project_id:
        return []
    return [mailer.send_project_updated_email(project_id, event.actor_id, list(recipients))]


def _mention_email(mailer, event, recipients, rendered) -> EmailSends:
    entity_id = event.returned("id")
    if not entity_id:
        return []
    entity_type = event.notification.entity_type or "taskcomment"
    return [
        mailer.send_mention_email(entity_type, entity_id, user_id, event.actor_id)
        for user_id in recipients
    ]


def _system_email(mailer, event, recipients, rendered) -> EmailSends:
    return [
        mailer.send_system_notification_email(
            user_id, rendered.title, rendered.message, rendered.action_url
        )
        for user_id in recipients
    ]


# Invitations and due-soon reminders have their own email flows.
EMAIL_BRANCHES: dict[NotificationType, EmailBranch] = {
    NotificationType.TASK_ASSIGNED: _task_assigned_email,
    NotificationType.TASK_STATUS_CHANGED: _task_status_changed_email,
    NotificationType.TASK_COMMENTED: _task_commented_email,
    NotificationType.PROJECT_CREATED: _project_created_email,
    NotificationType.PROJECT_UPDATED: _project_updated_email,
    NotificationType.MENTION: _mention_email,
    NotificationType.SYSTEM: _system_email,
}


# Types whose default message quotes the entity's title or name.
QUOTING_TYPES = frozenset(
    {
        NotificationType.TASK_ASSIGNED,
        NotificationType.TASK_STATUS_CHANGED,
        NotificationType.TASK_COMMENTED,
        NotificationType.TASK_DUE_SOON,
        NotificationType.PROJECT_CREATED,
        NotificationType.PROJECT_UPDATED,
        NotificationType.WORKSPACE_INVITED,
    }
)


class NotificationDelivery:
    """Send the emails and persist one in-app notification per recipient."""

    def __init__(
        self,
        writer: NotificationWriter,
        mailer: Mailer | None = None,
        *,
        entity_details: EntityDetails | None = None,
    ) -> None:
        self.writer = writer
        self.mailer = mailer
        self.entity_details = entity_details

    async def deliver(
        self,
        event: DispatchEvent,
        recipients: Sequence[str],
        *,
        organization_id: str | None = None,
    ) -> DeliveryReport:
        report = DeliveryReport()
        if event.notification is None or not recipients:
            return report

        rendered = render(event, await self._message_subject(event))
        report.emails_failed = await self._send_emails(event, recipients, rendered)

        policy = event.notification
        notifications = [
            Notification(
                id=None,
                user_id=user_id,
                type=NotificationType(policy.type),
                title=rendered.title,
                message=rendered.message,
                priority=NotificationPriority(policy.priority or NotificationPriority.MEDIUM),
                organization_id=organization_id,
                entity_type=policy.entity_type,
                entity_id=rendered.entity_id,
                action_url=rendered.action_url,
                created_by=event.actor_id,
            )
            for user_id in recipients
        ]
        results = await asyncio.gather(
            *(self.writer.create(notification) for notification in notifications),
            return_exceptions=True,
        )
        for user_id, result in zip(recipients, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Failed to create notification for user %s",
                    user_id,
                    exc_info=(type(result), result, result.__traceback__),
                )
                report.failed.append(user_id)
            else:
                report.notified.append(user_id)
        return report

    async def _message_subject(self, event: DispatchEvent) -> Any:
        """Return the record whose title the default message quotes.

        The result snapshot is used when it carries a ``title`` or ``name``.
        Otherwise the entity is looked up; comments are described by their task.
        """

        data = event.result_snapshot
        policy = event.notification
        if (
            policy.message
            or policy.type not in QUOTING_TYPES
            or self.entity_details is None
            or read_field(data, "title")
            or read_field(data, "name")
        ):
            return data

        if policy.type == NotificationType.TASK_COMMENTED:
            entity_type = "Task"
            entity_id = event.returned("taskId") or event.requested("taskId")
        else:
            entity_type = policy.entity_type
            entity_id = event.returned("id") or policy.entity_id
        if not entity_id:
            return data

        try:
            preview = await self.entity_details.resolve(entity_type, entity_id)
        except Exception:
            logger.warning(
                "Could not load %s %s for the notification message", entity_type, entity_id,
                exc_info=True,
            )
            return data
        if preview is None:
            return data
        return {"id": preview.id, "title": preview.name, "name": preview.name}

    async def _send_emails(
        self,
        event: DispatchEvent,
        recipients: Sequence[str],
        rendered: RenderedNotification,
    ) -> int:
        if self.mailer is None:
            return 0
        branch = EMAIL_BRANCHES.get(NotificationType(event.notification.type))
        if branch is None:
            return 0

        try:
            sends = branch(self.mailer, event, recipients, rendered)
        except Exception:
            logger.exception("Could not prepare %s emails", event.notification.type)
            return 1

        failures = 0
        for send in sends:
            try:
                await send
            except Exception:
                failures += 1
                logger.exception(
                    "Failed to send %s email notification", event.notification.type
                )
        return failures


__all__ = [
    "DeliveryReport",
    "EMAIL_BRANCHES",
    "NotificationDelivery",
    "RenderedNotification",
    "render",
]
