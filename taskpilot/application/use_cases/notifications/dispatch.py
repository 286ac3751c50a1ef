"""Fire-and-forget activity logging and notification dispatch.

Business handlers hand a :class:`DispatchEvent` to
:meth:`ActivityDispatcher.dispatch` once they are done (usually through the
:func:`notify_activity` decorator). The dispatcher schedules the pipeline as a
detached task and returns immediately; nothing that happens inside the
pipeline can delay or fail the handler that triggered it.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from functools import lru_cache
from typing import Any

import anyio
from anyio import from_thread
from sqlalchemy.orm import Session

from taskpilot.domain.entities import (
    ActivityLogEntry,
    ActivityPolicy,
    Actor,
    DispatchEvent,
    NotificationPolicy,
    read_field,
)
from taskpilot.infrastructure.database import SessionLocal
from taskpilot.infrastructure.email import SendGridMailer
from taskpilot.infrastructure.notifications import (
    SqlActivityLog,
    SqlEntityDetails,
    SqlNotificationWriter,
)

from .delivery import DeliveryReport, NotificationDelivery
from .ports import ActivityLog, Mailer
from .recipients import resolve_recipients

logger = logging.getLogger(__name__)


def extract_entity_id(
    field: str | Sequence[str] | None, result: Any, request: Any
) -> Any:
    """Return the first non-empty value of ``field`` from the result, then the request.

    ``field`` may be a single name or an ordered list of names. When nothing
    matches, the ``id`` of either snapshot is used.
    """

    names = [field] if isinstance(field, str) else list(field or ())
    for name in names:
        value = read_field(result, name) or read_field(request, name)
        if value:
            return value
    return read_field(result, "id") or read_field(request, "id") or None


class ActivityDispatcher:
    """Run the activity/notification pipeline detached from the caller."""

    def __init__(self, activity_log: ActivityLog, delivery: NotificationDelivery) -> None:
        self.activity_log = activity_log
        self.delivery = delivery
        self._tasks: set[asyncio.Task] = set()
        self._threads: set[threading.Thread] = set()

    def dispatch(self, event: DispatchEvent) -> asyncio.Task | None:
        """Schedule ``event`` for processing and return without waiting."""

        if event.activity is None and event.notification is None:
            return None

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            return self._spawn(event)

        try:
            # Sync handlers run in anyio worker threads; hand the spawn to the loop.
            return from_thread.run_sync(self._spawn, event)
        except RuntimeError:
            self._run_detached(event)
            return None

    async def process(self, event: DispatchEvent) -> DeliveryReport | None:
        """Log the activity and deliver notifications; never raises."""

        try:
            await self._log_activity(event)
            return await self._notify(event)
        except Exception:
            logger.exception(
                "Error in activity/notification dispatch for actor %s", event.actor_id
            )
            return None

    async def drain(self) -> None:
        """Wait for every in-flight dispatch to finish."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        for thread in list(self._threads):
            await anyio.to_thread.run_sync(thread.join)

    def _spawn(self, event: DispatchEvent) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self.process(event))
        self._tasks.add(task)
        task.add_done_callback(self._forget)
        return task

    def _forget(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Dispatch task failed", exc_info=task.exception())

    def _run_detached(self, event: DispatchEvent) -> None:
        def _target() -> None:
            try:
                anyio.run(self.process, event)
            finally:
                self._threads.discard(threading.current_thread())

        thread = threading.Thread(target=_target, name="activity-dispatch", daemon=True)
        self._threads.add(thread)
        thread.start()

    async def _log_activity(self, event: DispatchEvent) -> ActivityLogEntry | None:
        policy = event.activity
        if policy is None or event.actor is None:
            return None

        entity_id = extract_entity_id(
            policy.entity_id_field, event.result_snapshot, event.request_snapshot
        )
        organization_id = event.organization_id
        if not organization_id and entity_id:
            organization_id = await self._resolve_organization(policy.entity_type, entity_id)

        return await self.activity_log.log_activity(
            ActivityLogEntry(
                type=policy.type,
                description=policy.description,
                entity_type=policy.entity_type,
                entity_id=entity_id,
                user_id=event.actor.id,
                organization_id=organization_id,
                old_value=dict(event.request_snapshot) if policy.include_old_value else None,
                new_value=event.result_snapshot if policy.include_new_value else None,
            )
        )

    async def _notify(self, event: DispatchEvent) -> DeliveryReport | None:
        policy = event.notification
        if policy is None:
            return None

        organization_id = policy.organization_id or event.organization_id
        if not organization_id:
            entity_id = event.returned("id") or policy.entity_id
            if entity_id:
                organization_id = await self._resolve_organization(policy.entity_type, entity_id)

        recipients = await resolve_recipients(event, self.activity_log)
        if not recipients:
            logger.debug("No recipients for %s notification", policy.type)
            return DeliveryReport()
        return await self.delivery.deliver(event, recipients, organization_id=organization_id)

    async def _resolve_organization(
        self, entity_type: str | None, entity_id: str
    ) -> str | None:
        """Return the owning organization, or ``None`` when the lookup fails."""

        try:
            return await self.activity_log.get_organization_id_from_entity(
                entity_type, entity_id
            )
        except Exception:
            logger.warning(
                "Could not resolve organization for %s %s", entity_type, entity_id,
                exc_info=True,
            )
            return None


def build_activity_dispatcher(
    session_factory: Callable[[], Session] = SessionLocal,
    mailer: Mailer | None = None,
) -> ActivityDispatcher:
    """Wire the dispatcher to the SQLAlchemy adapters and the SendGrid mailer."""

    return ActivityDispatcher(
        SqlActivityLog(session_factory),
        NotificationDelivery(
            SqlNotificationWriter(session_factory),
            mailer if mailer is not None else SendGridMailer(session_factory),
            entity_details=SqlEntityDetails(session_factory),
        ),
    )


@lru_cache
def get_activity_dispatcher() -> ActivityDispatcher:
    """Return the process-wide dispatcher."""

    return build_activity_dispatcher()


def notify_activity(
    *,
    activity: ActivityPolicy | None = None,
    notification: NotificationPolicy | None = None,
    dispatcher: ActivityDispatcher | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Dispatch an event after the decorated handler returns.

    The wrapper consumes the ``actor`` and ``organization_id`` keyword
    arguments; every other keyword argument is forwarded to the handler and
    recorded as the request snapshot. The handler's return value becomes the
    result snapshot and is returned unchanged.
    """

    def _emit(
        actor: Actor | None,
        organization_id: str | None,
        request: Mapping[str, Any],
        result: Any,
    ) -> None:
        event = DispatchEvent(
            actor=actor,
            organization_id=organization_id,
            request_snapshot=dict(request),
            result_snapshot=result,
            activity=activity,
            notification=notification,
        )
        try:
            (dispatcher or get_activity_dispatcher()).dispatch(event)
        except Exception:
            logger.exception("Could not schedule activity/notification dispatch")

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(
                *args: Any,
                actor: Actor | None = None,
                organization_id: str | None = None,
                **kwargs: Any,
            ) -> Any:
                result = await func(*args, **kwargs)
                _emit(actor, organization_id, kwargs, result)
                return result

            return async_wrapper

        @functools.wraps(func)
        def wrapper(
            *args: Any,
            actor: Actor | None = None,
            organization_id: str | None = None,
            **kwargs: Any,
        ) -> Any:
            result = func(*args, **kwargs)
            _emit(actor, organization_id, kwargs, result)
            return result

        return wrapper

    return decorator


__all__ = [
    "ActivityDispatcher",
    "build_activity_dispatcher",
    "extract_entity_id",
    "get_activity_dispatcher",
    "notify_activity",
]
