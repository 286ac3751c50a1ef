"""Async wrapper around :class:`EntityDetailRepository`."""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy.orm import Session

from taskpilot.domain.entities import EntityPreview
from taskpilot.infrastructure.database import SessionLocal
from taskpilot.infrastructure.repositories import EntityDetailRepository

from ._threading import run_in_session


class SqlEntityDetails:
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self.session_factory = session_factory

    async def resolve(
        self, entity_type: str | None, entity_id: str | None
    ) -> EntityPreview | None:
        return await run_in_session(
            self.session_factory,
            lambda session: EntityDetailRepository(session).resolve(entity_type, entity_id),
        )


__all__ = ["SqlEntityDetails"]
