"""Column helpers shared by the ORM models."""

from uuid import uuid4

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON

json_type = JSON().with_variant(JSONB(), "postgresql")
IdType = String(36)


def new_id() -> str:
    """Return a random UUID string used as primary key."""

    return str(uuid4())


__all__ = ["IdType", "json_type", "new_id"]
