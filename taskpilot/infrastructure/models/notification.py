"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.sql import expression

from taskpilot.infrastructure.database import Base
from taskpilot.utils import now_in_app_naive_datetime

from .columns import IdType, new_id


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"
    __table_args__ = (Index("ix_notification_user_read", "user_id", "is_read"),)

    id = Column(IdType, primary_key=True, default=new_id)
    user_id = Column(IdType, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id = Column(IdType, nullable=True, index=True)
    type = Column(String(50), nullable=False)
    priority = Column(String(10), nullable=False, default="MEDIUM")
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(IdType, nullable=True)
    action_url = Column(String(512), nullable=True)
    created_by = Column(IdType, nullable=True)
    is_read = Column(
        Boolean, nullable=False, default=False, server_default=expression.false()
    )
    read_at = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["NotificationModel"]
