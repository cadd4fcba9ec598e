# cmdb/services/session/service.py
from __future__ import annotations

import logging
import uuid
from datetime import timedelta

from cmdb.infra.security import CredentialVerifier
from cmdb.services._shared.base import BaseService, Clock
from cmdb.services._shared.deadline import Deadline, check_deadline
from cmdb.services._shared.dto import Principal, UserOut
from cmdb.services._shared.errors import (
    AuthenticationError,
    InvalidToken,
    NotFoundError,
    TokenExpired,
)
from cmdb.services._shared.ports import TokenCodec
from cmdb.services.session.dto import LoginIn, LoginOut, RefreshIn, TokenPairOut

log = logging.getLogger(__name__)

INVALID_LOGIN = "Invalid username or password"
INVALID_REFRESH = "Invalid or expired refresh token"
INVALID_ACCESS = "Invalid or expired token"


class SessionService(BaseService):
    """
    Session lifecycle service (login / refresh / logout / validate).

    Refresh token rows move through ``active → revoked`` (rotation or logout)
    and are eventually swept; expiry is evaluated at read time. Every failure
    the caller can see is one generic message per operation; the precise
    ``reason`` only reaches the logs.

    Access tokens are verified without a store round-trip, so revoking
    refresh tokens leaves already issued access tokens valid until ``exp``.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        verifier: CredentialVerifier,
        clock: Clock | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """
        :param codec: Signs and verifies tokens.
        :param verifier: Checks passwords.
        :param clock: Current UTC time provider.
        :param timeout_seconds: Default deadline for each operation.
        """
        super().__init__(clock=clock, timeout_seconds=timeout_seconds)
        self.codec = codec
        self.verifier = verifier

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn, *, deadline: Deadline | None = None) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown username and wrong password fail identically, including the
        time spent on a password check.

        :param dto: Login input.
        :returns: Token pair and the user's public profile.
        :raises AuthenticationError: If credentials are invalid.
        :raises DeadlineExceeded: If the deadline passes between steps.
        """
        deadline = self.deadline(deadline)
        check_deadline(deadline)

        with self.ro_uow() as uow:
            user = uow.users.get_by_username(dto.username)
            profile = UserOut.from_model(user) if user is not None else None
            password_hash = user.password_hash if user is not None else None

        if profile is None or password_hash is None:
            self.verifier.burn_check(dto.password)
            self._log_failure("auth.login.failed", "unknown_user")
            raise AuthenticationError(INVALID_LOGIN)

        if not self.verifier.check_password(dto.password, password_hash):
            self._log_failure("auth.login.failed", "bad_password", user_id=profile.id)
            raise AuthenticationError(INVALID_LOGIN)

        check_deadline(deadline)
        pair = self._issue_and_store(profile.to_principal(), deadline=deadline)

        log.info(
            "auth.login.succeeded",
            extra={"event": "auth.login.succeeded", "user_id": str(profile.id)},
        )
        return LoginOut(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=profile,
        )

    # ------------------------------------------------------------------ #
    # Refresh with single-use rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn, *, deadline: Deadline | None = None) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        The stored row is revoked with a conditional update and the new row is
        inserted in the same transaction. Of two concurrent calls presenting
        the same token, only the one whose update flips ``revoked_at`` gets
        new tokens. Nothing here is retried: a failure after the revoke rolls
        the whole rotation back.

        :raises AuthenticationError: Invalid, expired, unknown, revoked or
            already rotated token.
        :raises DeadlineExceeded: If the deadline passes between steps.
        """
        deadline = self.deadline(deadline)
        check_deadline(deadline)
        now = self.now()

        try:
            claims = self.codec.verify(dto.refresh_token, now=now)
        except TokenExpired:
            self._log_failure("auth.refresh.failed", "token_expired")
            raise AuthenticationError(INVALID_REFRESH) from None
        except InvalidToken:
            self._log_failure("auth.refresh.failed", "token_invalid")
            raise AuthenticationError(INVALID_REFRESH) from None

        token_hash = self.codec.digest(dto.refresh_token)
        check_deadline(deadline)

        with self.rw_uow() as uow:
            row = uow.refresh_tokens.get_by_token_hash(token_hash)
            if row is None:
                self._log_failure("auth.refresh.failed", "not_found", user_id=claims.user_id)
                raise AuthenticationError(INVALID_REFRESH)
            if row.revoked_at is not None:
                # Presenting a rotated token again is a replay.
                self._log_failure("auth.refresh.failed", "revoked", user_id=row.user_id)
                raise AuthenticationError(INVALID_REFRESH)
            if not row.is_usable(now):
                self._log_failure("auth.refresh.failed", "row_expired", user_id=row.user_id)
                raise AuthenticationError(INVALID_REFRESH)
            if row.user_id != claims.user_id:
                self._log_failure("auth.refresh.failed", "subject_mismatch", user_id=row.user_id)
                raise AuthenticationError(INVALID_REFRESH)

            check_deadline(deadline)
            if not uow.refresh_tokens.revoke(row.id, now=now):
                self._log_failure("auth.refresh.failed", "lost_race", user_id=row.user_id)
                raise AuthenticationError(INVALID_REFRESH)

            user = uow.users.get(row.user_id)
            if user is None:
                self._log_failure("auth.refresh.failed", "user_missing", user_id=row.user_id)
                raise AuthenticationError(INVALID_REFRESH)

            # Claims follow the current user record, so a role change applies on rotation.
            principal = UserOut.from_model(user).to_principal()
            pair = self.codec.issue_pair(principal, now=now)
            uow.refresh_tokens.create(
                user_id=principal.user_id,
                token_hash=self.codec.digest(pair.refresh_token),
                expires_at=pair.refresh_expires_at,
            )
            check_deadline(deadline)

        log.info(
            "auth.refresh.succeeded",
            extra={"event": "auth.refresh.succeeded", "user_id": str(principal.user_id)},
        )
        return TokenPairOut(access_token=pair.access_token, refresh_token=pair.refresh_token)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, principal: Principal, *, deadline: Deadline | None = None) -> int:
        """
        Revoke every refresh token of ``principal`` (logout everywhere).

        :returns: Number of rows revoked; ``0`` when nothing was active.
        """
        deadline = self.deadline(deadline)
        check_deadline(deadline)
        revoked = self._revoke_all(principal.user_id)
        log.info(
            "auth.logout",
            extra={"event": "auth.logout", "user_id": str(principal.user_id), "removed": revoked},
        )
        return revoked

    # ------------------------------------------------------------------ #
    # Validate
    # ------------------------------------------------------------------ #

    def validate_token(self, access_token: str) -> Principal:
        """
        Verify an access token and return its principal.

        Pure signature and time check; the store is not consulted.

        :raises AuthenticationError: Invalid or expired token.
        """
        try:
            claims = self.codec.verify(access_token, now=self.now())
        except TokenExpired:
            self._log_failure("auth.validate.failed", "token_expired", level=logging.DEBUG)
            raise AuthenticationError(INVALID_ACCESS) from None
        except InvalidToken:
            self._log_failure("auth.validate.failed", "token_invalid")
            raise AuthenticationError(INVALID_ACCESS) from None
        return claims.principal

    # ------------------------------------------------------------------ #
    # Administration
    # ------------------------------------------------------------------ #

    def revoke_user(self, username: str) -> int:
        """
        Revoke all refresh tokens of ``username``.

        :returns: Number of rows revoked.
        :raises NotFoundError: If no such user exists.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_username(username)
            user_id = user.id if user is not None else None
        if user_id is None:
            raise NotFoundError("User", username)
        return self._revoke_all(user_id)

    def clean_expired(self, *, retention: timedelta) -> int:
        """
        Hard-delete expired rows and rows revoked longer than ``retention`` ago.

        Meant for a scheduled job, never for request handling.

        :returns: Number of rows deleted.
        """
        with self.rw_uow() as uow:
            removed = uow.refresh_tokens.clean_expired(now=self.now(), retention=retention)
        log.info(
            "auth.refresh_tokens.cleaned",
            extra={"event": "auth.refresh_tokens.cleaned", "removed": removed},
        )
        return removed

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue_and_store(self, principal: Principal, *, deadline: Deadline | None):
        now = self.now()
        pair = self.codec.issue_pair(principal, now=now)
        with self.rw_uow() as uow:
            uow.refresh_tokens.create(
                user_id=principal.user_id,
                token_hash=self.codec.digest(pair.refresh_token),
                expires_at=pair.refresh_expires_at,
            )
            check_deadline(deadline)
        return pair

    def _revoke_all(self, user_id: uuid.UUID) -> int:
        with self.rw_uow() as uow:
            return uow.refresh_tokens.revoke_all_for_user(user_id, now=self.now())

    @staticmethod
    def _log_failure(
        event: str,
        reason: str,
        *,
        user_id: uuid.UUID | None = None,
        level: int = logging.WARNING,
    ) -> None:
        extra: dict[str, object] = {"event": event, "reason": reason}
        if user_id is not None:
            extra["user_id"] = str(user_id)
        log.log(level, event, extra=extra)
