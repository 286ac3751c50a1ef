"""Aggregate application use cases."""

from .notifications import (
    ActivityDispatcher,
    get_activity_dispatcher,
    notify_activity,
)

__all__ = [
    "ActivityDispatcher",
    "get_activity_dispatcher",
    "notify_activity",
]
