"""Repository implementations backed by SQLAlchemy sessions."""

from .activity_log_repository import (
    ActivityLogRepository,
    normalize_entity_type,
    to_json_compatible,
)
from .entity_detail_repository import EntityDetailRepository
from .notification_repository import NotificationRepository
from .task_repository import TaskRepository
from .user_repository import UserRepository

__all__ = [
    "ActivityLogRepository",
    "EntityDetailRepository",
    "NotificationRepository",
    "TaskRepository",
    "UserRepository",
    "normalize_entity_type",
    "to_json_compatible",
]
