"""SQLAlchemy models for tasks, their statuses, comments and attachments."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import relationship

from taskpilot.infrastructure.database import Base
from taskpilot.utils import now_in_app_naive_datetime

from .columns import IdType, new_id

task_assignee_table = Table(
    "task_assignee",
    Base.metadata,
    Column("task_id", IdType, ForeignKey("task.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", IdType, ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
)

task_reporter_table = Table(
    "task_reporter",
    Base.metadata,
    Column("task_id", IdType, ForeignKey("task.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", IdType, ForeignKey("user.id", ondelete="CASCADE"), primary_key=True),
)


class TaskStatusModel(Base):
    __tablename__ = "task_status"

    id = Column(IdType, primary_key=True, default=new_id)
    name = Column(String(120), nullable=False)
    color = Column(String(20), nullable=True)
    # TODO / IN_PROGRESS / DONE
    category = Column(String(20), nullable=False, default="TODO")


class TaskModel(Base):
    """Unit of work inside a project."""

    __tablename__ = "task"

    id = Column(IdType, primary_key=True, default=new_id)
    project_id = Column(
        IdType, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status_id = Column(IdType, ForeignKey("task_status.id"), nullable=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    priority = Column(String(20), nullable=False, default="MEDIUM")
    task_number = Column(Integer, nullable=True)
    due_date = Column(DateTime(), nullable=True, index=True)
    completed_at = Column(DateTime(), nullable=True)

    project = relationship("ProjectModel", lazy="joined")
    status = relationship("TaskStatusModel", lazy="joined")
    assignees = relationship("UserModel", secondary=task_assignee_table, lazy="selectin")
    reporters = relationship("UserModel", secondary=task_reporter_table, lazy="selectin")


class TaskCommentModel(Base):
    __tablename__ = "task_comment"

    id = Column(IdType, primary_key=True, default=new_id)
    task_id = Column(IdType, ForeignKey("task.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(IdType, ForeignKey("user.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    task = relationship("TaskModel", lazy="joined")
    author = relationship("UserModel", lazy="joined")


class TaskAttachmentModel(Base):
    __tablename__ = "task_attachment"

    id = Column(IdType, primary_key=True, default=new_id)
    task_id = Column(IdType, ForeignKey("task.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(120), nullable=True)

    task = relationship("TaskModel", lazy="joined")


__all__ = [
    "TaskAttachmentModel",
    "TaskCommentModel",
    "TaskModel",
    "TaskStatusModel",
    "task_assignee_table",
    "task_reporter_table",
]
