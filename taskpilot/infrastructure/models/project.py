"""SQLAlchemy models for projects and their members."""

from sqlalchemy import Column, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from taskpilot.infrastructure.database import Base

from .columns import IdType, new_id


class ProjectModel(Base):
    __tablename__ = "project"

    id = Column(IdType, primary_key=True, default=new_id)
    workspace_id = Column(
        IdType, ForeignKey("workspace.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    avatar = Column(String(512), nullable=True)

    workspace = relationship("WorkspaceModel", lazy="joined")


class ProjectMemberModel(Base):
    __tablename__ = "project_member"
    __table_args__ = (UniqueConstraint("project_id", "user_id"),)

    id = Column(IdType, primary_key=True, default=new_id)
    project_id = Column(
        IdType, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(IdType, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(50), nullable=False, default="MEMBER")


__all__ = ["ProjectModel", "ProjectMemberModel"]
