from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from cmdb.services._shared.dto import Principal, TokenClaims


@dataclass(frozen=True, slots=True)
class IssuedPair:
    """
    Access/refresh pair minted for one principal at one instant.

    :ivar access_token: Short-lived bearer token.
    :ivar refresh_token: Long-lived token exchanged on ``/auth/refresh``.
    :ivar access_expires_at: ``exp`` of the access token.
    :ivar refresh_expires_at: ``exp`` of the refresh token; persisted server-side.
    """

    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime


class TokenCodec(Protocol):
    """Port for minting and verifying signed tokens."""

    access_ttl: timedelta
    refresh_ttl: timedelta

    def generate(self, principal: Principal, *, now: datetime, duration: timedelta) -> str: ...

    def issue_pair(self, principal: Principal, *, now: datetime) -> IssuedPair: ...

    def verify(self, token: str, *, now: datetime) -> TokenClaims: ...

    def digest(self, token: str) -> str: ...
