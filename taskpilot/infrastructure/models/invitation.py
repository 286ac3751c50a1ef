"""SQLAlchemy model for pending invitations."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from taskpilot.infrastructure.database import Base

from .columns import IdType, new_id


class InvitationModel(Base):
    """Invitation to an organization, workspace or project."""

    __tablename__ = "invitation"

    id = Column(IdType, primary_key=True, default=new_id)
    invitee_email = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default="MEMBER")
    status = Column(String(20), nullable=False, default="PENDING")
    expires_at = Column(DateTime(), nullable=True)
    organization_id = Column(IdType, ForeignKey("organization.id"), nullable=True)
    workspace_id = Column(IdType, ForeignKey("workspace.id"), nullable=True)
    project_id = Column(IdType, ForeignKey("project.id"), nullable=True)

    organization = relationship("OrganizationModel", lazy="joined")
    workspace = relationship("WorkspaceModel", lazy="joined")
    project = relationship("ProjectModel", lazy="joined")


__all__ = ["InvitationModel"]
