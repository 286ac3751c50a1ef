"""Transactional email delivery via SendGrid.

``send_email`` is the transport; :class:`SendGridMailer` composes the
per-notification messages from the database and hands them to it. Every
composer runs in a worker thread with its own session so the event loop is
never blocked by SQLAlchemy or the SendGrid HTTP call.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from html import escape
from typing import Any

import anyio
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from sqlalchemy.orm import Session

from taskpilot.config import Settings, get_settings
from taskpilot.infrastructure.database import SessionLocal
from taskpilot.infrastructure.models import (
    ProjectModel,
    TaskCommentModel,
    TaskModel,
    TaskStatusModel,
)
from taskpilot.infrastructure.repositories import ActivityLogRepository, UserRepository
from taskpilot.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)

SendFunction = Callable[[str, str, str], bool]

DEFAULT_OLD_STATUS = {"name": "Previous Status", "color": "#6b7280"}


def _describe_sendgrid_body(body: Any) -> str | None:
    """Return a readable description of a SendGrid error payload."""

    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            return body
    if isinstance(body, dict):
        messages = [
            f"{item['message']} (help: {item['help']})" if item.get("help") else str(item["message"])
            for item in body.get("errors") or []
            if isinstance(item, dict) and item.get("message")
        ]
        if messages:
            return "; ".join(messages)
        return json.dumps(body, default=str)
    if isinstance(body, list):
        return "; ".join(str(item) for item in body)
    return None


def send_email(subject: str, html_content: str, recipient: str) -> bool:
    """Send one HTML email; returns ``True`` when SendGrid accepted it."""

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email to %s", recipient)
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        response = SendGridAPIClient(settings.sendgrid_api_key).send(message)
    except Exception as exc:  # pragma: no cover - network failures depend on environment
        details = _describe_sendgrid_body(getattr(exc, "body", None))
        status_code = getattr(exc, "status_code", None)
        if status_code or details:
            logger.error(
                "SendGrid request for %s failed with status %s: %s",
                recipient,
                status_code,
                details,
            )
        else:
            logger.exception("Error sending email to %s via SendGrid", recipient)
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        logger.error(
            "SendGrid responded with status %s for %s: %s",
            status_code,
            recipient,
            _describe_sendgrid_body(getattr(response, "body", None)),
        )
        return False
    return True


def _paragraphs(*lines: str) -> str:
    return "".join(f"<p>{line}</p>" for line in lines if line)


def _link(url: str, label: str) -> str:
    return f'<a href="{escape(url, quote=True)}">{escape(label)}</a>'


class SendGridMailer:
    """Compose and send the notification emails.

    Each public coroutine returns the number of emails accepted by the
    transport. Missing records are logged and result in ``0``.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        *,
        send: SendFunction = send_email,
        settings: Settings | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.send = send
        self.settings = settings or get_settings()

    @property
    def frontend_url(self) -> str:
        return self.settings.frontend_url.rstrip("/")

    async def send_task_assigned_email(
        self, task_id: str, assignee_ids: Sequence[str], actor_id: str | None
    ) -> int:
        return await anyio.to_thread.run_sync(
            self._task_assigned, task_id, list(assignee_ids), actor_id
        )

    async def send_task_status_changed_email(
        self, task_id: str, old_status_id: str | None = None, actor_id: str | None = None
    ) -> int:
        return await anyio.to_thread.run_sync(
            self._task_status_changed, task_id, old_status_id, actor_id
        )

    async def send_task_commented_email(
        self, task_id: str, comment_id: str, actor_id: str, recipient_ids: Sequence[str]
    ) -> int:
        return await anyio.to_thread.run_sync(
            self._task_commented, task_id, comment_id, actor_id, list(recipient_ids)
        )

    async def send_project_created_email(
        self, project_id: str, actor_id: str, recipient_ids: Sequence[str]
    ) -> int:
        return await anyio.to_thread.run_sync(
            self._project_changed, project_id, actor_id, list(recipient_ids), True
        )

    async def send_project_updated_email(
        self, project_id: str, actor_id: str, recipient_ids: Sequence[str]
    ) -> int:
        return await anyio.to_thread.run_sync(
            self._project_changed, project_id, actor_id, list(recipient_ids), False
        )

    async def send_mention_email(
        self, entity_type: str, entity_id: str, mentioned_user_id: str, actor_id: str
    ) -> int:
        return await anyio.to_thread.run_sync(
            self._mention, entity_type, entity_id, mentioned_user_id, actor_id
        )

    async def send_system_notification_email(
        self, user_id: str, title: str, message: str, action_url: str | None = None
    ) -> int:
        return await anyio.to_thread.run_sync(
            self._system_notification, user_id, title, message, action_url
        )

    async def send_due_date_reminder_email(self, task_id: str) -> int:
        return await anyio.to_thread.run_sync(self._due_date_reminder, task_id)

    async def send_password_reset_email(
        self, email: str, *, user_name: str, reset_url: str
    ) -> int:
        html_content = _paragraphs(
            f"Hello {escape(user_name)},",
            "We received a request to reset your password.",
            _link(reset_url, "Reset your password"),
            "This link expires in 24 hours. If you did not ask for it, ignore this email.",
        )
        return await anyio.to_thread.run_sync(
            self._deliver_all, "Reset Your Password", [(email, html_content)]
        )

    async def send_password_reset_confirmation_email(
        self, email: str, *, user_name: str, reset_time: datetime | None = None
    ) -> int:
        reset_time = ensure_app_timezone(reset_time) or now_in_app_timezone()
        company = escape(self.settings.company_name)
        html_content = _paragraphs(
            f"Hello {escape(user_name)},",
            f"Your {company} password was reset on {reset_time:%Y-%m-%d %H:%M %Z}.",
            "If you did not make this change, contact "
            f"{escape(self.settings.support_email)} immediately.",
        )
        subject = f"Password Successfully Reset - {self.settings.company_name}"
        return await anyio.to_thread.run_sync(
            self._deliver_all, subject, [(email, html_content)]
        )

    def _deliver_all(self, subject: str, messages: Iterable[tuple[str, str]]) -> int:
        sent = 0
        for recipient, html_content in messages:
            try:
                if self.send(subject, html_content, recipient):
                    sent += 1
            except Exception:
                logger.exception("Failed to send '%s' email to %s", subject, recipient)
        return sent

    def _task_url(self, task_id: str, anchor: str = "") -> str:
        return f"{self.frontend_url}/tasks/{task_id}{anchor}"

    def _task_assigned(
        self, task_id: str, assignee_ids: list[str], actor_id: str | None
    ) -> int:
        with self.session_factory() as session:
            task = session.get(TaskModel, task_id)
            if task is None or not task.assignees:
                logger.warning("No assignees found for task %s", task_id)
                return 0
            assigner = UserRepository(session).get(actor_id)
            assigner_name = assigner.full_name if assigner else "System"
            organization = task.project.workspace.organization.name
            due = f"Due: {task.due_date:%Y-%m-%d}" if task.due_date else ""
            messages = []
            for assignee in task.assignees:
                if assignee.id not in assignee_ids:
                    continue
                if not assignee.email:
                    logger.warning("No email found for assignee %s", assignee.id)
                    continue
                messages.append(
                    (
                        assignee.email,
                        _paragraphs(
                            f"Hello {escape(assignee.full_name)},",
                            f"{escape(assigner_name)} assigned you to "
                            f"<strong>{escape(task.title)}</strong> in "
                            f"{escape(task.project.name)} ({escape(organization)}).",
                            f"Priority: {escape(task.priority)}",
                            due,
                            _link(self._task_url(task.id), "Open task"),
                        ),
                    )
                )
            return self._deliver_all(f"Task Assigned: {task.title}", messages)

    def _task_status_changed(
        self, task_id: str, old_status_id: str | None, actor_id: str | None
    ) -> int:
        with self.session_factory() as session:
            task = session.get(TaskModel, task_id)
            if task is None:
                return 0
            if not old_status_id:
                old_status_id, logged_actor = self._previous_status_from_log(session, task_id)
                actor_id = actor_id or logged_actor
            old_status = DEFAULT_OLD_STATUS
            if old_status_id:
                status = session.get(TaskStatusModel, old_status_id)
                if status is not None:
                    old_status = {"name": status.name, "color": status.color}
            new_status = task.status.name if task.status is not None else "Unknown"

            recipients: dict[str, str] = {}
            for user in [*task.assignees, *task.reporters]:
                if user.email and user.id != actor_id:
                    recipients.setdefault(user.email, user.full_name)
            html_content = _paragraphs(
                f"The status of <strong>{escape(task.title)}</strong> in "
                f"{escape(task.project.name)} changed.",
                f"{escape(old_status['name'])} &rarr; {escape(new_status)}",
                _link(self._task_url(task.id), "Open task"),
            )
            return self._deliver_all(
                f"Task Status Changed: {task.title}",
                [(email, html_content) for email in recipients],
            )

    @staticmethod
    def _previous_status_from_log(
        session: Session, task_id: str
    ) -> tuple[str | None, str | None]:
        for entry in ActivityLogRepository(session).list_for_entity(task_id, limit=20):
            if entry.type != "TASK_STATUS_CHANGED":
                continue
            old_value = entry.old_value if isinstance(entry.old_value, dict) else {}
            status = old_value.get("status")
            status_id = old_value.get("statusId") or (
                status.get("id") if isinstance(status, dict) else None
            )
            return status_id, entry.user_id
        return None, None

    def _task_commented(
        self, task_id: str, comment_id: str, actor_id: str, recipient_ids: list[str]
    ) -> int:
        with self.session_factory() as session:
            comment = session.get(TaskCommentModel, comment_id)
            if comment is None:
                logger.warning("Comment %s not found", comment_id)
                return 0
            task = comment.task
            commenter = comment.author.full_name if comment.author else "Someone"
            recipients = UserRepository(session).list_by_ids(
                user_id for user_id in recipient_ids if user_id != actor_id
            )
            messages = [
                (
                    recipient.email,
                    _paragraphs(
                        f"Hello {escape(recipient.full_name)},",
                        f"{escape(commenter)} commented on "
                        f"<strong>{escape(task.title)}</strong>:",
                        f"<blockquote>{escape(comment.content)}</blockquote>",
                        _link(self._task_url(task.id), "View the conversation"),
                    ),
                )
                for recipient in recipients
                if recipient.email
            ]
            return self._deliver_all(f"New Comment on Task: {task.title}", messages)

    def _project_changed(
        self, project_id: str, actor_id: str, recipient_ids: list[str], created: bool
    ) -> int:
        with self.session_factory() as session:
            project = session.get(ProjectModel, project_id)
            if project is None:
                logger.warning("Project %s not found", project_id)
                return 0
            users = UserRepository(session)
            actor = users.get(actor_id)
            if actor is None:
                logger.warning("User %s not found for project email", actor_id)
                return 0
            verb, subject = (
                ("created", f"New Project Created: {project.name}")
                if created
                else ("updated", f"Project Updated: {project.name}")
            )
            project_url = f"{self.frontend_url}/projects/{project.slug}"
            recipients = users.list_by_ids(
                user_id for user_id in recipient_ids if user_id != actor_id
            )
            messages = [
                (
                    recipient.email,
                    _paragraphs(
                        f"Hello {escape(recipient.full_name)},",
                        f"{escape(actor.full_name)} {verb} the project "
                        f"<strong>{escape(project.name)}</strong> in "
                        f"{escape(project.workspace.name)}.",
                        escape(project.description or ""),
                        _link(project_url, "Open project"),
                    ),
                )
                for recipient in recipients
                if recipient.email
            ]
            return self._deliver_all(subject, messages)

    def _mention(
        self, entity_type: str, entity_id: str, mentioned_user_id: str, actor_id: str
    ) -> int:
        if mentioned_user_id == actor_id:
            return 0
        with self.session_factory() as session:
            users = UserRepository(session)
            mentioned = users.get(mentioned_user_id)
            mentioner = users.get(actor_id)
            if mentioned is None or not mentioned.email or mentioner is None:
                logger.warning("User data not found for mention email")
                return 0
            target = self._mention_target(session, entity_type, entity_id)
            if target is None:
                logger.warning("Entity %s with id %s not found", entity_type, entity_id)
                return 0
            title, url = target
            html_content = _paragraphs(
                f"Hello {escape(mentioned.full_name)},",
                f"{escape(mentioner.full_name)} mentioned you in "
                f"<strong>{escape(title)}</strong>.",
                _link(url, "See the mention"),
            )
            return self._deliver_all(
                f"{mentioner.full_name} mentioned you", [(mentioned.email, html_content)]
            )

    def _mention_target(
        self, session: Session, entity_type: str, entity_id: str
    ) -> tuple[str, str] | None:
        kind = entity_type.lower()
        if kind == "task":
            task = session.get(TaskModel, entity_id)
            return (task.title, self._task_url(task.id)) if task else None
        if kind == "taskcomment":
            comment = session.get(TaskCommentModel, entity_id)
            if comment is None:
                return None
            return comment.task.title, self._task_url(comment.task.id, "#comments")
        return None

    def _system_notification(
        self, user_id: str, title: str, message: str, action_url: str | None
    ) -> int:
        with self.session_factory() as session:
            user = UserRepository(session).get(user_id)
        if user is None or not user.email:
            logger.warning("User %s not found or has no email", user_id)
            return 0
        url = action_url or "/"
        if url.startswith("/"):
            url = f"{self.frontend_url}{url}"
        html_content = _paragraphs(
            f"Hello {escape(user.full_name)},",
            escape(message),
            _link(url, "Open TaskPilot"),
        )
        return self._deliver_all(title, [(user.email, html_content)])

    def _due_date_reminder(self, task_id: str) -> int:
        with self.session_factory() as session:
            task = session.get(TaskModel, task_id)
            if task is None or not task.assignees or task.due_date is None:
                return 0
            due_date = ensure_app_timezone(task.due_date)
            hours_left = round((due_date - now_in_app_timezone()).total_seconds() / 3600)
            messages = [
                (
                    assignee.email,
                    _paragraphs(
                        f"Hello {escape(assignee.full_name)},",
                        f"<strong>{escape(task.title)}</strong> in "
                        f"{escape(task.project.name)} is due in about {hours_left} hour(s).",
                        _link(self._task_url(task.id), "Open task"),
                    ),
                )
                for assignee in task.assignees
                if assignee.email
            ]
            return self._deliver_all(f"Task Due Soon: {task.title}", messages)


__all__ = ["SendGridMailer", "send_email"]
