"""Persisted refresh-token rows."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cmdb.core.extensions import db

from .base import CreatedAtMixin, ReprMixin, UUIDPKMixin, as_utc

if TYPE_CHECKING:
    from .user import User


class RefreshToken(UUIDPKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Server-side record of an issued refresh token.

    Only the SHA-256 digest of the raw token is stored. A row is *usable* while
    ``revoked_at`` is null and ``expires_at`` lies in the future; once set,
    ``revoked_at`` is never cleared.

    Fields
    ------
    user_id : uuid.UUID
        Owning user (cascade on delete).
    token_hash : str
        Hex digest of the raw token. Unique.
    expires_at : datetime
        Absolute expiry (UTC), mirrors the token's ``exp`` claim.
    revoked_at : datetime | None
        When the row was rotated away or logged out.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(back_populates="refresh_tokens")

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_refresh_tokens_token_hash"),
        Index("ix_refresh_tokens_user_id", "user_id"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
    )

    def is_usable(self, now: datetime) -> bool:
        """Return ``True`` when the row is neither revoked nor expired at ``now``."""
        return self.revoked_at is None and as_utc(self.expires_at) > as_utc(now)
