# cmdb/services/users/service.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from cmdb.infra.security import CredentialVerifier
from cmdb.models.role import Role
from cmdb.services._shared.base import BaseService, Clock
from cmdb.services._shared.dto import UserOut
from cmdb.services._shared.errors import ConflictError, violates

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UserCreateIn:
    """
    Input DTO for creating a user.

    :param username: Login handle.
    :param password: Raw password, hashed before storage.
    :param role: Assigned role.
    :param email: Optional contact email.
    """

    username: str
    password: str
    role: Role = Role.USER
    email: str | None = None


class UserService(BaseService):
    """Minimal user directory used to bootstrap and inspect accounts."""

    def __init__(self, *, verifier: CredentialVerifier, clock: Clock | None = None) -> None:
        super().__init__(clock=clock)
        self.verifier = verifier

    def list_users(
        self,
        *,
        sort: list[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[UserOut]:
        with self.ro_uow() as uow:
            users = uow.users.list(sort=sort or ["username"], limit=limit, offset=offset)
            return [UserOut.from_model(u) for u in users]

    def create_user(self, dto: UserCreateIn) -> UserOut:
        """
        Create a user with a freshly hashed password.

        :raises ConflictError: If the username or email is already taken.
        """
        password_hash = self.verifier.hash_password(dto.password)

        with self.rw_uow() as uow:
            repo = uow.users
            if repo.exists_by_username(dto.username):
                raise ConflictError("User", "username already in use")
            try:
                user = repo.add(
                    repo.model(
                        username=dto.username,
                        email=dto.email,
                        role=Role.parse(dto.role),
                        password_hash=password_hash,
                    )
                )
            except IntegrityError as exc:
                if violates(exc, "email"):
                    raise ConflictError("User", "email already in use") from exc
                if violates(exc, "username"):
                    raise ConflictError("User", "username already in use") from exc
                raise
            out = UserOut.from_model(user)

        log.info("user.created", extra={"event": "user.created", "user_id": str(out.id)})
        return out
