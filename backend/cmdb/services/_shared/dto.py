"""Shared value objects passed between the API layer and services."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from cmdb.models.role import Role


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Verified identity attached to a request.

    Built only from a verified access token (or from a freshly authenticated
    user) and handed explicitly to views and services.

    :param user_id: User primary key.
    :type user_id: uuid.UUID
    :param username: Login handle at issuance time.
    :type username: str
    :param role: Exactly one role.
    :type role: Role
    """

    user_id: uuid.UUID
    username: str
    role: Role

    def has_role(self, *roles: Role) -> bool:
        return self.role in roles


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Decoded and verified claim bundle shared by access and refresh tokens.

    :param principal: Identity the token speaks for.
    :param issued_at: ``iat``.
    :param not_before: ``nbf``.
    :param expires_at: ``exp``.
    :param jti: Random token id; keeps tokens minted in the same second distinct.
    """

    principal: Principal
    issued_at: datetime
    not_before: datetime
    expires_at: datetime
    jti: str

    @property
    def user_id(self) -> uuid.UUID:
        return self.principal.user_id

    @property
    def username(self) -> str:
        return self.principal.username

    @property
    def role(self) -> Role:
        return self.principal.role


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Public user profile; never carries the password hash.

    :param id: User primary key.
    :param username: Login handle.
    :param email: Contact email, if any.
    :param role: Assigned role.
    :param created_at: Creation timestamp (UTC).
    """

    id: uuid.UUID
    username: str
    email: str | None
    role: Role
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, user) -> UserOut:
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            role=Role.parse(user.role),
            created_at=user.created_at,
        )

    def to_principal(self) -> Principal:
        return Principal(user_id=self.id, username=self.username, role=self.role)
