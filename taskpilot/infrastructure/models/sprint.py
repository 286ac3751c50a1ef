"""SQLAlchemy model for project sprints."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from taskpilot.infrastructure.database import Base

from .columns import IdType, new_id


class SprintModel(Base):
    __tablename__ = "sprint"

    id = Column(IdType, primary_key=True, default=new_id)
    project_id = Column(
        IdType, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    goal = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="PLANNING")
    start_date = Column(DateTime(), nullable=True)
    end_date = Column(DateTime(), nullable=True)

    project = relationship("ProjectModel", lazy="joined")


__all__ = ["SprintModel"]
