"""Domain entity for the users notifications and emails are addressed to."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    username: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


__all__ = ["User"]
