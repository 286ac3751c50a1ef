"""SQLAlchemy models for organizations and their members."""

from sqlalchemy import Column, ForeignKey, String, Text, UniqueConstraint

from taskpilot.infrastructure.database import Base

from .columns import IdType, new_id


class OrganizationModel(Base):
    """Tenant that owns workspaces."""

    __tablename__ = "organization"

    id = Column(IdType, primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    avatar = Column(String(512), nullable=True)


class OrganizationMemberModel(Base):
    __tablename__ = "organization_member"
    __table_args__ = (UniqueConstraint("organization_id", "user_id"),)

    id = Column(IdType, primary_key=True, default=new_id)
    organization_id = Column(
        IdType, ForeignKey("organization.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(IdType, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(50), nullable=False, default="MEMBER")


__all__ = ["OrganizationModel", "OrganizationMemberModel"]
