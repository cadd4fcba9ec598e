"""User repository: lookups used by authentication and user management."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from cmdb.models.user import User
from cmdb.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER handles tokens or password checks; only DB-level user access.
    """

    model = User

    def _sortable_fields(self):
        return {
            "username": User.username,
            "role": User.role,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        return {
            "username": User.username,
            "email": User.email,
            "role": User.role,
        }

    def get_by_username(self, username: str) -> User | None:
        """Fetch a user by exact username.

        Surrounding whitespace is ignored, matching the model's normalization.

        :param username: Login handle.
        :type username: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.username == username.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_username(self, username: str) -> bool:
        stmt = select(User.id).where(User.username == username.strip())
        return self.session.execute(stmt).first() is not None
