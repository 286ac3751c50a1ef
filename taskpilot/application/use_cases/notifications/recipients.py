"""Decide which users must hear about a dispatched event."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from taskpilot.domain.entities import DispatchEvent, NotificationType, read_field

from .ports import ActivityLog

logger = logging.getLogger(__name__)

RecipientHandler = Callable[[DispatchEvent, ActivityLog], Awaitable[list[str]]]

# These reach the actor too when the actor is legitimately among the recipients.
SELF_NOTIFYING_TYPES = frozenset(
    {
        NotificationType.TASK_ASSIGNED,
        NotificationType.WORKSPACE_INVITED,
        NotificationType.MENTION,
        NotificationType.TASK_DUE_SOON,
    }
)


def _as_ids(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable):
        return [item for item in value if isinstance(item, str)]
    return []


def _ids_of(items: Any) -> list[str] | None:
    if items is None:
        return None
    return [read_field(item, "id") for item in items]


def _first_present(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


async def _lookup(
    label: str, lookup: Callable[[str], Awaitable[list[str]]], key: Any
) -> list[str]:
    if not key:
        return []
    try:
        return list(await lookup(key))
    except Exception:
        logger.warning("Error getting %s for %s", label, key, exc_info=True)
        return []


async def _task_assigned(event: DispatchEvent, directory: ActivityLog) -> list[str]:
    assignee_ids = _first_present(
        event.requested("assigneeIds"),
        _ids_of(event.requested("assignees")),
        _ids_of(event.returned("assignees")),
        event.returned("assigneeIds"),
    )
    return _as_ids(assignee_ids)


async def _task_status_changed(event: DispatchEvent, directory: ActivityLog) -> list[str]:
    task_id = event.returned("id") or event.notification.entity_id
    return await _lookup("task participants", directory.get_task_participants, task_id)


async def _task_commented(event: DispatchEvent, directory: ActivityLog) -> list[str]:
    task_id = event.returned("taskId") or event.requested("taskId")
    return await _lookup("task participants", directory.get_task_participants, task_id)


async def _task_due_soon(event: DispatchEvent, directory: ActivityLog) -> list[str]:
    task_id = event.returned("id") or event.notification.entity_id
    return await _lookup("task participants", directory.get_task_participants, task_id)


async def _project_created(event: DispatchEvent, directory: ActivityLog) -> list[str]:
    workspace_id = event.requested("workspaceId") or event.returned("workspaceId")
    return await _lookup("workspace members", directory.get_workspace_members, workspace_id)


async def _project_updated(event: DispatchEvent, directory: ActivityLog) -> list[str]:
    project_id = event.returned("id") or event.notification.entity_id
    return await _lookup("project members", directory.get_project_members, project_id)


async def _workspace_invited(event: DispatchEvent, directory: ActivityLog) -> list[str]:
    return _as_ids(event.requested("userId") or event.requested("invitedUserId"))


async def _mention(event: DispatchEvent, directory: ActivityLog) -> list[str]:
    mentioned = event.requested("mentionedUsers")
    if isinstance(mentioned, str):
        return [mentioned]
    return [user_id for user_id in _as_ids(mentioned) if user_id != event.actor_id]


async def _system(event: DispatchEvent, directory: ActivityLog) -> list[str]:
    policy = event.notification
    if policy.notify_user_id:
        return [policy.notify_user_id]
    if policy.notify_all_org_members:
        organization_id = policy.organization_id or event.organization_id
        return await _lookup(
            "organization members", directory.get_organization_members, organization_id
        )
    return []


async def _policy_targets(event: DispatchEvent, directory: ActivityLog) -> list[str]:
    policy = event.notification
    if policy.notify_user_id:
        return [policy.notify_user_id]
    return _as_ids(policy.notify_user_ids)


RECIPIENT_HANDLERS: dict[NotificationType, RecipientHandler] = {
    NotificationType.TASK_ASSIGNED: _task_assigned,
    NotificationType.TASK_STATUS_CHANGED: _task_status_changed,
    NotificationType.TASK_COMMENTED: _task_commented,
    NotificationType.TASK_DUE_SOON: _task_due_soon,
    NotificationType.PROJECT_CREATED: _project_created,
    NotificationType.PROJECT_UPDATED: _project_updated,
    NotificationType.WORKSPACE_INVITED: _workspace_invited,
    NotificationType.MENTION: _mention,
    NotificationType.SYSTEM: _system,
}


def finalize_recipients(
    candidates: Iterable[str | None],
    *,
    notification_type: NotificationType,
    actor_id: str | None,
) -> tuple[str, ...]:
    """Drop empty ids, dedupe keeping first-seen order and apply self-exclusion."""

    unique = dict.fromkeys(candidate for candidate in candidates if candidate)
    if notification_type in SELF_NOTIFYING_TYPES or not actor_id:
        return tuple(unique)
    return tuple(user_id for user_id in unique if user_id != actor_id)


async def resolve_recipients(event: DispatchEvent, directory: ActivityLog) -> tuple[str, ...]:
    """Return the ordered, deduplicated recipients for ``event``."""

    policy = event.notification
    if policy is None:
        return ()
    notification_type = NotificationType(policy.type)
    handler = RECIPIENT_HANDLERS.get(notification_type, _policy_targets)
    candidates = await handler(event, directory)
    return finalize_recipients(
        candidates, notification_type=notification_type, actor_id=event.actor_id
    )


__all__ = [
    "RECIPIENT_HANDLERS",
    "SELF_NOTIFYING_TYPES",
    "finalize_recipients",
    "resolve_recipients",
]
