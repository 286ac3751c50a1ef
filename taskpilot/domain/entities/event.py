"""Domain objects describing a dispatch-worthy business operation outcome."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .notification import NotificationPriority, NotificationType


@dataclass(frozen=True)
class Actor:
    """User who performed the operation."""

    id: str
    first_name: str = ""
    last_name: str = ""
    email: str | None = None

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or "Someone"


@dataclass(frozen=True)
class ActivityPolicy:
    """Static activity-log configuration attached to an operation."""

    type: str
    entity_type: str
    description: str
    entity_id_field: str | Sequence[str] | None = None
    include_old_value: bool = False
    include_new_value: bool = False


@dataclass(frozen=True)
class NotificationPolicy:
    """Static notification configuration attached to an operation."""

    type: NotificationType
    entity_type: str
    priority: NotificationPriority = NotificationPriority.MEDIUM
    title: str | None = None
    message: str | None = None
    action_url: str | None = None
    entity_id: str | None = None
    organization_id: str | None = None
    notify_user_id: str | None = None
    notify_user_ids: Sequence[str] = ()
    notify_all_org_members: bool = False


@dataclass
class DispatchEvent:
    """Completed operation handed to the dispatch pipeline.

    ``request_snapshot`` is the merged body/params/query of the call and
    ``result_snapshot`` its return value (a mapping or an object exposing
    attributes). ``actor`` is ``None`` for scheduler-originated events.
    """

    actor: Actor | None
    organization_id: str | None = None
    request_snapshot: Mapping[str, Any] = field(default_factory=dict)
    result_snapshot: Any = None
    activity: ActivityPolicy | None = None
    notification: NotificationPolicy | None = None

    @property
    def actor_id(self) -> str | None:
        return self.actor.id if self.actor is not None else None

    def requested(self, key: str) -> Any:
        return read_field(self.request_snapshot, key)

    def returned(self, key: str) -> Any:
        return read_field(self.result_snapshot, key)


def read_field(snapshot: Any, key: str) -> Any:
    """Return ``key`` from a mapping or an attribute-bearing object."""

    if snapshot is None:
        return None
    if isinstance(snapshot, Mapping):
        return snapshot.get(key)
    return getattr(snapshot, key, None)


__all__ = [
    "Actor",
    "ActivityPolicy",
    "DispatchEvent",
    "NotificationPolicy",
    "read_field",
]
