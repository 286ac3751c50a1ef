"""SQLAlchemy backed activity log and membership directory."""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskpilot.domain.entities import ActivityLogEntry
from taskpilot.infrastructure.database import SessionLocal
from taskpilot.infrastructure.repositories import ActivityLogRepository

from ._threading import run_in_session

logger = logging.getLogger(__name__)


class SqlActivityLog:
    """Persist activity entries and answer membership lookups.

    Membership lookups never raise: a database failure is logged as a warning
    and contributes no recipients.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self.session_factory = session_factory

    async def log_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        return await run_in_session(
            self.session_factory,
            lambda session: ActivityLogRepository(session).create(entry),
        )

    async def get_organization_id_from_entity(
        self, entity_type: str | None, entity_id: str | None
    ) -> str | None:
        try:
            return await run_in_session(
                self.session_factory,
                lambda session: ActivityLogRepository(
                    session
                ).get_organization_id_from_entity(entity_type, entity_id),
            )
        except SQLAlchemyError:
            logger.warning(
                "Could not resolve organization for %s %s", entity_type, entity_id,
                exc_info=True,
            )
            return None

    async def get_task_participants(self, task_id: str) -> list[str]:
        return await self._members("task", task_id, ActivityLogRepository.get_task_participants)

    async def get_workspace_members(self, workspace_id: str) -> list[str]:
        return await self._members(
            "workspace", workspace_id, ActivityLogRepository.get_workspace_members
        )

    async def get_project_members(self, project_id: str) -> list[str]:
        return await self._members(
            "project", project_id, ActivityLogRepository.get_project_members
        )

    async def get_organization_members(self, organization_id: str) -> list[str]:
        return await self._members(
            "organization", organization_id, ActivityLogRepository.get_organization_members
        )

    async def _members(
        self,
        scope: str,
        scope_id: str,
        lookup: Callable[[ActivityLogRepository, str], list[str]],
    ) -> list[str]:
        try:
            return await run_in_session(
                self.session_factory,
                lambda session: lookup(ActivityLogRepository(session), scope_id),
            )
        except SQLAlchemyError:
            logger.warning("Failed to load %s members for %s", scope, scope_id, exc_info=True)
            return []


__all__ = ["SqlActivityLog"]
