"""Persistence layer for activity log records and membership lookups."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy.orm import Session

from taskpilot.domain.entities import ActivityLogEntry
from taskpilot.infrastructure.models import (
    ActivityLogModel,
    OrganizationMemberModel,
    ProjectMemberModel,
    ProjectModel,
    TaskModel,
    WorkspaceMemberModel,
    WorkspaceModel,
)
from taskpilot.utils import ensure_app_naive_datetime, ensure_app_timezone, now_in_app_timezone


def normalize_entity_type(entity_type: str | None) -> str:
    """Return ``entity_type`` lower-cased with separators removed.

    ``"Task Comment"``, ``"task_comment"`` and ``"TaskComment"`` all map to
    ``"taskcomment"``.
    """

    if not entity_type:
        return ""
    return "".join(ch for ch in entity_type.lower() if ch not in " _-")


class ActivityLogRepository:
    """Write activity entries and answer the membership questions recipients need."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self._organization_lookups: dict[str, Callable[[str], str | None]] = {
            "task": self._organization_of_task,
            "project": self._organization_of_project,
            "workspace": self._organization_of_workspace,
            "organization": lambda entity_id: entity_id,
        }

    def create(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        model = ActivityLogModel(
            type=entry.type,
            description=entry.description,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            user_id=entry.user_id,
            organization_id=entry.organization_id,
            old_value=to_json_compatible(entry.old_value),
            new_value=to_json_compatible(entry.new_value),
            created_at=ensure_app_naive_datetime(entry.created_at or now_in_app_timezone()),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_for_entity(self, entity_id: str, *, limit: int = 50) -> list[ActivityLogEntry]:
        models = (
            self.session.query(ActivityLogModel)
            .filter(ActivityLogModel.entity_id == entity_id)
            .order_by(ActivityLogModel.created_at.desc())
            .limit(limit)
            .all()
        )
        return [self._to_entity(model) for model in models]

    def get_organization_id_from_entity(
        self, entity_type: str | None, entity_id: str | None
    ) -> str | None:
        if not entity_id:
            return None
        lookup = self._organization_lookups.get(normalize_entity_type(entity_type))
        if lookup is None:
            return None
        return lookup(entity_id)

    def get_task_participants(self, task_id: str) -> list[str]:
        """Return assignee ids followed by reporter ids (may repeat)."""

        task = self.session.get(TaskModel, task_id)
        if task is None:
            return []
        participants = [user.id for user in task.assignees] + [
            user.id for user in task.reporters
        ]
        return [user_id for user_id in participants if user_id]

    def get_workspace_members(self, workspace_id: str) -> list[str]:
        rows = (
            self.session.query(WorkspaceMemberModel.user_id)
            .filter(WorkspaceMemberModel.workspace_id == workspace_id)
            .all()
        )
        return [row.user_id for row in rows]

    def get_project_members(self, project_id: str) -> list[str]:
        rows = (
            self.session.query(ProjectMemberModel.user_id)
            .filter(ProjectMemberModel.project_id == project_id)
            .all()
        )
        return [row.user_id for row in rows]

    def get_organization_members(self, organization_id: str) -> list[str]:
        rows = (
            self.session.query(OrganizationMemberModel.user_id)
            .filter(OrganizationMemberModel.organization_id == organization_id)
            .all()
        )
        return [row.user_id for row in rows]

    def _organization_of_task(self, task_id: str) -> str | None:
        row = (
            self.session.query(WorkspaceModel.organization_id)
            .join(ProjectModel, ProjectModel.workspace_id == WorkspaceModel.id)
            .join(TaskModel, TaskModel.project_id == ProjectModel.id)
            .filter(TaskModel.id == task_id)
            .one_or_none()
        )
        return row.organization_id if row else None

    def _organization_of_project(self, project_id: str) -> str | None:
        row = (
            self.session.query(WorkspaceModel.organization_id)
            .join(ProjectModel, ProjectModel.workspace_id == WorkspaceModel.id)
            .filter(ProjectModel.id == project_id)
            .one_or_none()
        )
        return row.organization_id if row else None

    def _organization_of_workspace(self, workspace_id: str) -> str | None:
        row = (
            self.session.query(WorkspaceModel.organization_id)
            .filter(WorkspaceModel.id == workspace_id)
            .one_or_none()
        )
        return row.organization_id if row else None

    @staticmethod
    def _to_entity(model: ActivityLogModel) -> ActivityLogEntry:
        return ActivityLogEntry(
            id=model.id,
            type=model.type,
            description=model.description,
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            user_id=model.user_id,
            organization_id=model.organization_id,
            old_value=model.old_value,
            new_value=model.new_value,
            created_at=ensure_app_timezone(model.created_at),
        )


def to_json_compatible(value: Any) -> Any:
    """Convert a request/result snapshot into something a JSON column accepts."""

    if value is None:
        return None
    return json.loads(json.dumps(value, default=_json_default))


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if hasattr(value, "model_dump"):
        return value.model_dump()
    if hasattr(value, "__dict__"):
        return {key: item for key, item in vars(value).items() if not key.startswith("_")}
    return str(value)


__all__ = ["ActivityLogRepository", "normalize_entity_type", "to_json_compatible"]
