"""SQLAlchemy models for workspaces and their members."""

from sqlalchemy import Column, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from taskpilot.infrastructure.database import Base

from .columns import IdType, new_id


class WorkspaceModel(Base):
    __tablename__ = "workspace"

    id = Column(IdType, primary_key=True, default=new_id)
    organization_id = Column(
        IdType, ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    avatar = Column(String(512), nullable=True)

    organization = relationship("OrganizationModel", lazy="joined")


class WorkspaceMemberModel(Base):
    __tablename__ = "workspace_member"
    __table_args__ = (UniqueConstraint("workspace_id", "user_id"),)

    id = Column(IdType, primary_key=True, default=new_id)
    workspace_id = Column(
        IdType, ForeignKey("workspace.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(IdType, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(50), nullable=False, default="MEMBER")


__all__ = ["WorkspaceModel", "WorkspaceMemberModel"]
