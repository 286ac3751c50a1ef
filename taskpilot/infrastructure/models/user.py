"""SQLAlchemy model for the user table."""

from sqlalchemy import Column, DateTime, String

from taskpilot.infrastructure.database import Base
from taskpilot.utils import now_in_app_naive_datetime

from .columns import IdType, new_id


class UserModel(Base):
    """Minimal user projection needed to address notifications and emails."""

    __tablename__ = "user"

    id = Column(IdType, primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(120), nullable=True)
    first_name = Column(String(120), nullable=False, default="")
    last_name = Column(String(120), nullable=False, default="")
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


__all__ = ["UserModel"]
