"""Due-date reminder sweep."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

import anyio
from sqlalchemy.orm import Session

from taskpilot.domain.entities import (
    DispatchEvent,
    DueTask,
    NotificationPolicy,
    NotificationPriority,
    NotificationType,
)
from taskpilot.infrastructure.repositories import TaskRepository
from taskpilot.utils import ensure_app_timezone, now_in_app_timezone

from .dispatch import ActivityDispatcher
from .ports import Mailer

logger = logging.getLogger(__name__)


def build_due_soon_event(task: DueTask) -> DispatchEvent:
    """Return the actor-less reminder event for ``task``."""

    return DispatchEvent(
        actor=None,
        organization_id=task.organization_id,
        result_snapshot={
            "id": task.id,
            "title": task.title,
            "dueDate": task.due_date.isoformat(),
        },
        notification=NotificationPolicy(
            type=NotificationType.TASK_DUE_SOON,
            entity_type="Task",
            priority=NotificationPriority.HIGH,
            entity_id=task.id,
            organization_id=task.organization_id,
        ),
    )


async def dispatch_due_soon_reminders(
    session: Session,
    dispatcher: ActivityDispatcher,
    *,
    now: datetime | None = None,
    window_hours: int = 24,
    mailer: Mailer | None = None,
) -> int:
    """Dispatch a TASK_DUE_SOON event for every open task due within the window.

    When ``mailer`` is given the assignees also receive a reminder email.
    Returns the number of events dispatched.
    """

    start = ensure_app_timezone(now) or now_in_app_timezone()
    end = start + timedelta(hours=window_hours)
    tasks = await anyio.to_thread.run_sync(
        TaskRepository(session).list_due_between, start, end
    )

    for task in tasks:
        dispatcher.dispatch(build_due_soon_event(task))
        if mailer is None:
            continue
        try:
            await mailer.send_due_date_reminder_email(task.id)
        except Exception:
            logger.exception("Failed to send due date reminder email for task %s", task.id)

    logger.info("Dispatched %s due date reminders", len(tasks))
    return len(tasks)


async def run_due_soon_reminders(
    session_factory: Callable[[], Session],
    dispatcher: ActivityDispatcher,
    *,
    interval_minutes: int,
    window_hours: int = 24,
    mailer: Mailer | None = None,
) -> None:
    """Run the reminder sweep every ``interval_minutes`` until cancelled."""

    while True:
        try:
            with session_factory() as session:
                await dispatch_due_soon_reminders(
                    session, dispatcher, window_hours=window_hours, mailer=mailer
                )
        except Exception:
            logger.exception("Failed to check for due date reminders")
        await anyio.sleep(interval_minutes * 60)


__all__ = [
    "build_due_soon_event",
    "dispatch_due_soon_reminders",
    "run_due_soon_reminders",
]
