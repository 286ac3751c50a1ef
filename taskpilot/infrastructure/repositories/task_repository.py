"""Queries over tasks used by the reminder sweep."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from taskpilot.domain.entities import DueTask
from taskpilot.infrastructure.models import TaskModel, TaskStatusModel
from taskpilot.utils import ensure_app_naive_datetime, ensure_app_timezone

DONE_CATEGORY = "DONE"


class TaskRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_due_between(self, start: datetime, end: datetime) -> Sequence[DueTask]:
        """Return open, assigned tasks whose due date falls in ``[start, end]``."""

        models = (
            self.session.query(TaskModel)
            .outerjoin(TaskStatusModel, TaskModel.status_id == TaskStatusModel.id)
            .filter(
                TaskModel.due_date >= ensure_app_naive_datetime(start),
                TaskModel.due_date <= ensure_app_naive_datetime(end),
                TaskModel.completed_at.is_(None),
                TaskModel.assignees.any(),
                or_(
                    TaskModel.status_id.is_(None),
                    TaskStatusModel.category != DONE_CATEGORY,
                ),
            )
            .order_by(TaskModel.due_date.asc())
            .all()
        )
        return [
            DueTask(
                id=model.id,
                title=model.title,
                due_date=ensure_app_timezone(model.due_date),
                organization_id=model.project.workspace.organization_id
                if model.project is not None
                else None,
            )
            for model in models
        ]


__all__ = ["TaskRepository"]
