"""Domain entity describing an activity log record."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class ActivityLogEntry:
    """Immutable trace of a business operation performed by a user."""

    type: str
    description: str
    entity_type: str
    entity_id: str | None
    user_id: str
    organization_id: str | None = None
    old_value: Any = None
    new_value: Any = None
    id: str | None = None
    created_at: datetime | None = None


__all__ = ["ActivityLogEntry"]
