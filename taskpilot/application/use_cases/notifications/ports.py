"""Collaborator interfaces the dispatch pipeline depends on."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from taskpilot.domain.entities import ActivityLogEntry, EntityPreview, Notification


class ActivityLog(Protocol):
    async def log_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry: ...

    async def get_organization_id_from_entity(
        self, entity_type: str | None, entity_id: str | None
    ) -> str | None: ...

    async def get_task_participants(self, task_id: str) -> list[str]: ...

    async def get_workspace_members(self, workspace_id: str) -> list[str]: ...

    async def get_project_members(self, project_id: str) -> list[str]: ...

    async def get_organization_members(self, organization_id: str) -> list[str]: ...


class Mailer(Protocol):
    """Best-effort transactional email sender; each call returns emails sent."""

    async def send_task_assigned_email(
        self, task_id: str, assignee_ids: Sequence[str], actor_id: str | None
    ) -> int: ...

    async def send_task_status_changed_email(
        self, task_id: str, old_status_id: str | None = None, actor_id: str | None = None
    ) -> int: ...

    async def send_task_commented_email(
        self, task_id: str, comment_id: str, actor_id: str, recipient_ids: Sequence[str]
    ) -> int: ...

    async def send_project_created_email(
        self, project_id: str, actor_id: str, recipient_ids: Sequence[str]
    ) -> int: ...

    async def send_project_updated_email(
        self, project_id: str, actor_id: str, recipient_ids: Sequence[str]
    ) -> int: ...

    async def send_mention_email(
        self, entity_type: str, entity_id: str, mentioned_user_id: str, actor_id: str
    ) -> int: ...

    async def send_system_notification_email(
        self, user_id: str, title: str, message: str, action_url: str | None = None
    ) -> int: ...

    async def send_due_date_reminder_email(self, task_id: str) -> int: ...

    async def send_password_reset_email(
        self, email: str, *, user_name: str, reset_url: str
    ) -> int: ...

    async def send_password_reset_confirmation_email(
        self, email: str, *, user_name: str, reset_time: datetime | None = None
    ) -> int: ...


class NotificationWriter(Protocol):
    async def create(self, notification: Notification) -> Notification: ...


class EntityDetails(Protocol):
    async def resolve(
        self, entity_type: str | None, entity_id: str | None
    ) -> EntityPreview | None: ...


__all__ = ["ActivityLog", "EntityDetails", "Mailer", "NotificationWriter"]
