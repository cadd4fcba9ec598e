"""User model: the identity the auth core authenticates against."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from cmdb.core.extensions import db

from .base import CreatedAtMixin, ReprMixin, UUIDPKMixin
from .role import Role

if TYPE_CHECKING:
    from .refresh_token import RefreshToken


class User(UUIDPKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Authentication identity.

    The user directory is owned by user management; the auth core only reads
    ``username``, ``role`` and ``password_hash``.

    Fields
    ------
    username : str
        Login handle. Unique, trimmed.
    email : str | None
        Contact email. Stored normalized (lowercase, trimmed).
    role : Role
        Exactly one role out of :class:`Role`.
    password_hash : str
        Output of :class:`cmdb.infra.security.credentials.CredentialVerifier`.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str | None] = mapped_column(String(254), nullable=True)
    role: Mapped[Role] = mapped_column(
        SAEnum(
            Role,
            name="user_role",
            native_enum=False,
            length=16,
            validate_strings=True,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=Role.USER,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_username", "username"),
    )

    # -------------------- Validators --------------------
    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """
        Normalize and validate username.

        :raises ValueError: If username is missing or only whitespace.
        """
        if not isinstance(value, str):
            raise ValueError("Username is required.")
        v = value.strip()
        if not v:
            raise ValueError("Username is required.")
        return v

    @validates("email")
    def _normalize_email(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("role")
    def _coerce_role(self, key: str, value: Role | str) -> Role:
        return Role.parse(value)
