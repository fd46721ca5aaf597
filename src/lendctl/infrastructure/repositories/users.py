"""User store port."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import insert, select

from lendctl.domain.ids import generate_id
from lendctl.domain.models import User
from lendctl.infrastructure.database.schema import users

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy import Connection


class UserRepository:
    """Patron lookups and registration."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def find_by_id(self, user_id: str) -> User | None:
        row = self._conn.execute(select(users).where(users.c.id == user_id)).mappings().first()
        return User.model_validate(dict(row)) if row is not None else None

    def find_by_email(self, email: str) -> User | None:
        row = self._conn.execute(select(users).where(users.c.email == email)).mappings().first()
        return User.model_validate(dict(row)) if row is not None else None

    def create(self, *, name: str, email: str, loan_limit: int, registered_at: datetime) -> User:
        user_id = generate_id("user")
        self._conn.execute(
            insert(users).values(
                id=user_id,
                name=name,
                email=email,
                loan_limit=loan_limit,
                registered_at=registered_at,
            )
        )
        return User(id=user_id, name=name, email=email, loan_limit=loan_limit)
