"""Lightweight projection of an entity referenced by a notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class EntityPreview:
    """Normalized summary of a task, project, workspace or similar record."""

    id: str
    type: str
    name: str
    slug: str | None = None
    parent: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)


__all__ = ["EntityPreview"]
