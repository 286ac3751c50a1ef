"""Async adapters that let the dispatch pipeline talk to the database."""

from .activity_log import SqlActivityLog
from .entity_details import SqlEntityDetails
from .writer import SqlNotificationWriter

__all__ = ["SqlActivityLog", "SqlEntityDetails", "SqlNotificationWriter"]
