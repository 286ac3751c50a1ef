"""Polymorphic lookup of the entity a notification points at."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskpilot.domain.entities import EntityPreview
from taskpilot.infrastructure.models import (
    InvitationModel,
    OrganizationModel,
    ProjectModel,
    SprintModel,
    TaskAttachmentModel,
    TaskCommentModel,
    TaskModel,
    WorkspaceModel,
)
from taskpilot.utils import ensure_app_timezone

from .activity_log_repository import normalize_entity_type

logger = logging.getLogger(__name__)


def _ref(model: Any, label: str = "name") -> dict[str, Any] | None:
    """Return the ``{id, name, slug}`` reference used as preview parent."""

    if model is None:
        return None
    reference = {"id": model.id, label: getattr(model, label)}
    slug = getattr(model, "slug", None)
    if slug is not None:
        reference["slug"] = slug
    return reference


class EntityDetailRepository:
    """Resolve ``(entity_type, entity_id)`` into an :class:`EntityPreview`.

    Unknown types, missing records and database errors all resolve to
    ``None``; this lookup never raises.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self._loaders: dict[str, Callable[[str], EntityPreview | None]] = {
            "task": self._task,
            "taskcomment": self._task_comment,
            "project": self._project,
            "workspace": self._workspace,
            "organization": self._organization,
            "sprint": self._sprint,
            "invitation": self._invitation,
            "taskattachment": self._task_attachment,
        }

    def resolve(self, entity_type: str | None, entity_id: str | None) -> EntityPreview | None:
        if not entity_type or not entity_id:
            return None
        loader = self._loaders.get(normalize_entity_type(entity_type))
        if loader is None:
            return None
        try:
            return loader(entity_id)
        except SQLAlchemyError:
            logger.exception("Error fetching %s with id %s", entity_type, entity_id)
            self.session.rollback()
            return None

    def _task(self, entity_id: str) -> EntityPreview | None:
        task = self.session.get(TaskModel, entity_id)
        if task is None:
            return None
        status = None
        if task.status is not None:
            status = {
                "id": task.status.id,
                "name": task.status.name,
                "color": task.status.color,
                "category": task.status.category,
            }
        return EntityPreview(
            id=task.id,
            type="task",
            name=task.title,
            slug=task.slug,
            parent=_ref(task.project),
            extra={
                "priority": task.priority,
                "task_number": task.task_number,
                "status": status,
            },
        )

    def _task_comment(self, entity_id: str) -> EntityPreview | None:
        comment = self.session.get(TaskCommentModel, entity_id)
        if comment is None:
            return None
        task_title = comment.task.title if comment.task is not None else "Task"
        return EntityPreview(
            id=comment.id,
            type="task_comment",
            name=f"Comment on {task_title}",
            parent=_ref(comment.task, "title"),
            extra={
                "content": comment.content,
                "created_at": ensure_app_timezone(comment.created_at),
            },
        )

    def _project(self, entity_id: str) -> EntityPreview | None:
        project = self.session.get(ProjectModel, entity_id)
        if project is None:
            return None
        return EntityPreview(
            id=project.id,
            type="project",
            name=project.name,
            slug=project.slug,
            parent=_ref(project.workspace),
            extra={"avatar": project.avatar, "description": project.description},
        )

    def _workspace(self, entity_id: str) -> EntityPreview | None:
        workspace = self.session.get(WorkspaceModel, entity_id)
        if workspace is None:
            return None
        return EntityPreview(
            id=workspace.id,
            type="workspace",
            name=workspace.name,
            slug=workspace.slug,
            parent=_ref(workspace.organization),
            extra={"avatar": workspace.avatar, "description": workspace.description},
        )

    def _organization(self, entity_id: str) -> EntityPreview | None:
        organization = self.session.get(OrganizationModel, entity_id)
        if organization is None:
            return None
        return EntityPreview(
            id=organization.id,
            type="organization",
            name=organization.name,
            slug=organization.slug,
            extra={"avatar": organization.avatar, "description": organization.description},
        )

    def _sprint(self, entity_id: str) -> EntityPreview | None:
        sprint = self.session.get(SprintModel, entity_id)
        if sprint is None:
            return None
        return EntityPreview(
            id=sprint.id,
            type="sprint",
            name=sprint.name,
            parent=_ref(sprint.project),
            extra={
                "goal": sprint.goal,
                "status": sprint.status,
                "start_date": ensure_app_timezone(sprint.start_date),
                "end_date": ensure_app_timezone(sprint.end_date),
            },
        )

    def _invitation(self, entity_id: str) -> EntityPreview | None:
        invitation = self.session.get(InvitationModel, entity_id)
        if invitation is None:
            return None
        # Most specific scope wins.
        parent = _ref(invitation.project) or _ref(invitation.workspace) or _ref(
            invitation.organization
        )
        return EntityPreview(
            id=invitation.id,
            type="invitation",
            name=invitation.invitee_email,
            parent=parent,
            extra={
                "role": invitation.role,
                "status": invitation.status,
                "expires_at": ensure_app_timezone(invitation.expires_at),
            },
        )

    def _task_attachment(self, entity_id: str) -> EntityPreview | None:
        attachment = self.session.get(TaskAttachmentModel, entity_id)
        if attachment is None:
            return None
        return EntityPreview(
            id=attachment.id,
            type="task_attachment",
            name=attachment.file_name,
            parent=_ref(attachment.task, "title"),
            extra={"file_size": attachment.file_size, "mime_type": attachment.mime_type},
        )


__all__ = ["EntityDetailRepository"]
