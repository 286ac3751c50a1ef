"""Domain projection of tasks that need a due-date reminder."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class DueTask:
    id: str
    title: str
    due_date: datetime
    organization_id: str | None = None


__all__ = ["DueTask"]
