"""SQLAlchemy backed notification writer used by the delivery pass."""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy.orm import Session

from taskpilot.domain.entities import Notification
from taskpilot.infrastructure.database import SessionLocal
from taskpilot.infrastructure.repositories import NotificationRepository

from ._threading import run_in_session


class SqlNotificationWriter:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self.session_factory = session_factory

    async def create(self, notification: Notification) -> Notification:
        return await run_in_session(
            self.session_factory,
            lambda session: NotificationRepository(session).create(notification),
        )


__all__ = ["SqlNotificationWriter"]
