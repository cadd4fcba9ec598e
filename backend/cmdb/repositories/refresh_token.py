"""Refresh-token store: persistence of issued refresh tokens and their revocation."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import cast

from sqlalchemy import delete, or_, select, update

from cmdb.models.refresh_token import RefreshToken
from cmdb.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    Every state change is a single SQL statement so that concurrent callers
    rely on the database, not on application locks:

    * ``revoke`` is a compare-and-set (``UPDATE ... WHERE revoked_at IS NULL``);
      of two racing callers exactly one sees ``True``.
    * Rows are never un-revoked.

    Bulk statements do not synchronize the identity map; callers that need
    the new state of an already loaded row must refresh it.
    """

    model = RefreshToken

    def _sortable_fields(self):
        return {"created_at": RefreshToken.created_at, "expires_at": RefreshToken.expires_at}

    # ------------------------------------------------------------------ create

    def create(self, *, user_id: uuid.UUID, token_hash: str, expires_at: datetime) -> RefreshToken:
        """Insert a new, unrevoked row.

        :param user_id: Owning user.
        :param token_hash: Digest of the raw refresh token.
        :param expires_at: Absolute expiry (UTC).
        :returns: The flushed row.
        :raises sqlalchemy.exc.IntegrityError: If ``token_hash`` is already stored.
        """
        row = RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        return self.add(row)

    # ------------------------------------------------------------------ lookup

    def get_by_token_hash(self, token_hash: str) -> RefreshToken | None:
        """Return the row for ``token_hash`` whatever its state, or ``None``."""
        stmt = select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def list_for_user(
        self, user_id: uuid.UUID, *, usable_at: datetime | None = None
    ) -> list[RefreshToken]:
        """List a user's rows, newest first.

        :param usable_at: When given, only rows still usable at that instant.
        """
        stmt = select(RefreshToken).where(RefreshToken.user_id == user_id)
        if usable_at is not None:
            stmt = stmt.where(
                RefreshToken.revoked_at.is_(None),
                RefreshToken.expires_at > usable_at,
            )
        stmt = stmt.order_by(RefreshToken.created_at.desc(), RefreshToken.id.asc())
        return list(self.session.execute(stmt).scalars().all())

    # -------------------------------------------------------------- revocation

    def revoke(self, token_id: uuid.UUID, *, now: datetime) -> bool:
        """Revoke one row if it is not revoked yet.

        :returns: ``True`` only for the caller that flipped ``revoked_at``.
            A missing row and an already revoked row both give ``False``.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def revoke_all_for_user(self, user_id: uuid.UUID, *, now: datetime) -> int:
        """Revoke every unrevoked row of ``user_id``.

        :returns: Number of rows revoked; ``0`` is not an error.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked_at.is_(None))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    # ----------------------------------------------------------------- sweeping

    def clean_expired(self, *, now: datetime, retention: timedelta = timedelta(0)) -> int:
        """Hard-delete rows past ``expires_at``, or revoked before ``now - retention``.

        Revoked rows stay for ``retention`` after revocation.

        :returns: Number of rows deleted.
        """
        stmt = (
            delete(RefreshToken)
            .where(
                or_(
                    RefreshToken.expires_at < now,
                    RefreshToken.revoked_at < now - retention,
                )
            )
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
