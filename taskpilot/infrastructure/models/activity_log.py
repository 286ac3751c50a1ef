"""SQLAlchemy model for activity log records."""

from sqlalchemy import Column, DateTime, String, Text

from taskpilot.infrastructure.database import Base
from taskpilot.utils import now_in_app_naive_datetime

from .columns import IdType, json_type, new_id


class ActivityLogModel(Base):
    """Database representation of activity entries."""

    __tablename__ = "activity_log"

    id = Column(IdType, primary_key=True, default=new_id)
    type = Column(String(50), nullable=False)
    description = Column(Text, nullable=False)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(IdType, nullable=True, index=True)
    user_id = Column(IdType, nullable=False, index=True)
    organization_id = Column(IdType, nullable=True, index=True)
    old_value = Column(json_type, nullable=True)
    new_value = Column(json_type, nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)


__all__ = ["ActivityLogModel"]
