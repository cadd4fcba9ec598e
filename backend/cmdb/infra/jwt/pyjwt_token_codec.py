"""HMAC-signed JWT codec built on PyJWT."""

from __future__ import annotations

import hashlib
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from cmdb.models.role import Role
from cmdb.services._shared.dto import Principal, TokenClaims
from cmdb.services._shared.errors import InvalidToken, TokenExpired
from cmdb.services._shared.ports import IssuedPair, TokenCodec

SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")
REQUIRED_CLAIMS = ("user_id", "username", "role", "iat", "nbf", "exp")


def _epoch(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp())


def _from_epoch(value: int) -> datetime:
    return datetime.fromtimestamp(value, tz=UTC)


@dataclass(slots=True)
class JWTTokenCodec(TokenCodec):
    """
    Mint and verify access/refresh tokens with a single shared secret.

    Both token kinds carry the same claim set; they differ only in lifetime.
    Verification is pinned to ``algorithm``: a token whose header names any
    other algorithm (``none`` included) is rejected before the signature is
    looked at. Time checks use the caller's ``now`` rather than the wall clock.

    :param secret: HMAC key.
    :param algorithm: One of :data:`SUPPORTED_ALGORITHMS`.
    :param access_ttl: Access token lifetime.
    :param refresh_ttl: Refresh token lifetime.
    """

    secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = field(default_factory=lambda: timedelta(minutes=15))
    refresh_ttl: timedelta = field(default_factory=lambda: timedelta(hours=168))

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError("JWT secret must not be empty.")
        if self.algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported JWT algorithm: {self.algorithm!r}")

    @classmethod
    def from_config(cls, config: Any) -> JWTTokenCodec:
        """Build a codec from a Flask config mapping."""
        return cls(
            secret=config["JWT_SECRET_KEY"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            access_ttl=timedelta(seconds=int(config.get("ACCESS_TOKEN_TTL_SECONDS", 900))),
            refresh_ttl=timedelta(seconds=int(config.get("REFRESH_TOKEN_TTL_SECONDS", 604800))),
        )

    # ------------------------------------------------------------------ mint

    def generate(self, principal: Principal, *, now: datetime, duration: timedelta) -> str:
        """
        Sign a token for ``principal`` valid over ``[now, now + duration]``.

        :raises ValueError: If ``duration`` is not positive.
        """
        if duration <= timedelta(0):
            raise ValueError("Token duration must be positive.")
        issued = _epoch(now)
        payload = {
            "user_id": str(principal.user_id),
            "username": principal.username,
            "role": principal.role.value,
            "iat": issued,
            "nbf": issued,
            "exp": issued + int(duration.total_seconds()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def issue_pair(self, principal: Principal, *, now: datetime) -> IssuedPair:
        issued = _epoch(now)
        return IssuedPair(
            access_token=self.generate(principal, now=now, duration=self.access_ttl),
            refresh_token=self.generate(principal, now=now, duration=self.refresh_ttl),
            access_expires_at=_from_epoch(issued + int(self.access_ttl.total_seconds())),
            refresh_expires_at=_from_epoch(issued + int(self.refresh_ttl.total_seconds())),
        )

    # ---------------------------------------------------------------- verify

    def verify(self, token: str, *, now: datetime) -> TokenClaims:
        """
        Check signature, algorithm and validity window of ``token`` at ``now``.

        :raises InvalidToken: Malformed token, wrong algorithm, bad signature,
            missing or ill-typed claims, or ``nbf`` still in the future.
        :raises TokenExpired: Valid signature but ``now`` is past ``exp``.
        """
        if not isinstance(token, str) or not token:
            raise InvalidToken()
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as exc:
            raise InvalidToken() from exc
        if header.get("alg") != self.algorithm:
            raise InvalidToken("Unexpected signing algorithm")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                    "require": list(REQUIRED_CLAIMS),
                },
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidToken() from exc

        claims = self._parse_claims(payload)
        current = _epoch(now)
        if current < _epoch(claims.not_before):
            raise InvalidToken("Token not yet valid")
        if current > _epoch(claims.expires_at):
            raise TokenExpired()
        return claims

    def digest(self, token: str) -> str:
        """Return the SHA-256 hex digest stored in place of a raw refresh token."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    # --------------------------------------------------------------- helpers

    @staticmethod
    def _parse_claims(payload: dict[str, Any]) -> TokenClaims:
        try:
            user_id = uuid.UUID(str(payload["user_id"]))
            username = payload["username"]
            role = Role.parse(payload["role"])
            times = [payload[k] for k in ("iat", "nbf", "exp")]
        except (KeyError, ValueError, TypeError) as exc:
            raise InvalidToken() from exc
        if not isinstance(username, str) or not username:
            raise InvalidToken()
        if not all(isinstance(t, int) and not isinstance(t, bool) for t in times):
            raise InvalidToken()
        iat, nbf, exp = times
        return TokenClaims(
            principal=Principal(user_id=user_id, username=username, role=role),
            issued_at=_from_epoch(iat),
            not_before=_from_epoch(nbf),
            expires_at=_from_epoch(exp),
            jti=str(payload.get("jti", "")),
        )
