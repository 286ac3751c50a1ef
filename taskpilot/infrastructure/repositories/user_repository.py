"""Read access to user records."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from taskpilot.domain.entities import User
from taskpilot.infrastructure.models import UserModel


class UserRepository:
    """Look up users by identifier."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str | None) -> User | None:
        if not user_id:
            return None
        model = self.session.get(UserModel, user_id)
        return self._to_entity(model) if model else None

    def list_by_ids(self, user_ids: Iterable[str]) -> Sequence[User]:
        """Return the users matching ``user_ids`` in the order requested."""

        ids = [user_id for user_id in dict.fromkeys(user_ids) if user_id]
        if not ids:
            return []
        models = self.session.query(UserModel).filter(UserModel.id.in_(ids)).all()
        by_id = {model.id: model for model in models}
        return [self._to_entity(by_id[user_id]) for user_id in ids if user_id in by_id]

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            first_name=model.first_name or "",
            last_name=model.last_name or "",
            username=model.username,
        )


__all__ = ["UserRepository"]
