"""Default titles, messages and action URLs for generated notifications."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from taskpilot.domain.entities import NotificationType, read_field
from taskpilot.infrastructure.repositories import normalize_entity_type

DEFAULT_TITLE = "Notification"
DEFAULT_ACTION_URL = "/"

TITLES: dict[NotificationType, str] = {
    NotificationType.TASK_ASSIGNED: "Task Assigned",
    NotificationType.TASK_STATUS_CHANGED: "Task Status Updated",
    NotificationType.TASK_COMMENTED: "New Comment",
    NotificationType.TASK_DUE_SOON: "Task Due Soon",
    NotificationType.PROJECT_CREATED: "New Project Created",
    NotificationType.PROJECT_UPDATED: "Project Updated",
    NotificationType.WORKSPACE_INVITED: "Workspace Invitation",
    NotificationType.MENTION: "You were mentioned",
    NotificationType.SYSTEM: "System Notification",
}

# Each builder receives the actor display name and the result snapshot.
MessageBuilder = Callable[[str, Any], str]

MESSAGES: dict[NotificationType, MessageBuilder] = {
    NotificationType.TASK_ASSIGNED: lambda actor, data: (
        f'{actor} assigned you to task "{read_field(data, "title")}"'
    ),
    NotificationType.TASK_STATUS_CHANGED: lambda actor, data: (
        f'{actor} updated the status of task "{read_field(data, "title")}"'
    ),
    NotificationType.TASK_COMMENTED: lambda actor, data: (
        f'{actor} commented on task "{read_field(data, "title")}"'
    ),
    NotificationType.TASK_DUE_SOON: lambda actor, data: (
        f'Task "{read_field(data, "title")}" is due soon'
    ),
    NotificationType.PROJECT_CREATED: lambda actor, data: (
        f'{actor} created a new project "{read_field(data, "name")}"'
    ),
    NotificationType.PROJECT_UPDATED: lambda actor, data: (
        f'{actor} updated project "{read_field(data, "name")}"'
    ),
    NotificationType.WORKSPACE_INVITED: lambda actor, data: (
        f'{actor} invited you to join workspace "{read_field(data, "name")}"'
    ),
    NotificationType.MENTION: lambda actor, data: f"{actor} mentioned you in a comment",
    NotificationType.SYSTEM: lambda actor, data: (
        read_field(data, "message") or "System notification"
    ),
}

ACTION_PATHS: dict[str, str] = {
    "task": "/tasks/{id}",
    "project": "/projects/{id}",
    "workspace": "/workspaces/{id}",
    "taskcomment": "/tasks/{id}#comments",
    "user": "/users/{id}",
    "organization": "/organizations/{id}",
}


def default_title(notification_type: NotificationType | str) -> str:
    return TITLES.get(_coerce(notification_type), DEFAULT_TITLE)


def default_message(
    notification_type: NotificationType | str, actor_name: str, data: Any
) -> str:
    builder = MESSAGES.get(_coerce(notification_type))
    if builder is None:
        return f"{actor_name} performed an action"
    return builder(actor_name, data)


def default_action_url(entity_type: str | None, entity_id: str | None) -> str:
    """Return the client path for ``entity_type``/``entity_id`` or ``/``."""

    if not entity_id or not entity_type:
        return DEFAULT_ACTION_URL
    template = ACTION_PATHS.get(normalize_entity_type(entity_type))
    if template is None:
        return DEFAULT_ACTION_URL
    return template.format(id=entity_id)


def _coerce(notification_type: NotificationType | str) -> NotificationType | None:
    try:
        return NotificationType(notification_type)
    except ValueError:
        return None


__all__ = [
    "ACTION_PATHS",
    "MESSAGES",
    "TITLES",
    "default_action_url",
    "default_message",
    "default_title",
]
