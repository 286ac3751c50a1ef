"""Errors raised by the notification store use cases."""


class NotificationNotFoundError(ValueError):
    """Raised when a notification does not exist or belongs to another user."""

    def __init__(self, notification_id: str) -> None:
        super().__init__("Notification not found")
        self.notification_id = notification_id


class InvalidPaginationError(ValueError):
    """Raised by strict pagination when the requested page is below 1."""


__all__ = ["InvalidPaginationError", "NotificationNotFoundError"]
