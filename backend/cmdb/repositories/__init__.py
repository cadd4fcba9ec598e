"""Repository package exposing persistence-layer access for the auth core."""

from __future__ import annotations

from cmdb.repositories.base import BaseRepository, apply_sorting, parse_sort_tokens
from cmdb.repositories.refresh_token import RefreshTokenRepository
from cmdb.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "apply_sorting",
    "parse_sort_tokens",
    # Domain
    "RefreshTokenRepository",
    "UserRepository",
]
