"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`cmdb.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``cmdb.services._shared.base``)
    * :class:`BaseService`

- Shared DTOs (from ``cmdb.services._shared.dto``)
    * :class:`Principal`, :class:`TokenClaims`, :class:`UserOut`

- Session service (from ``cmdb.services.session``)
    * :class:`SessionService`
    * DTOs: :class:`LoginIn`, :class:`LoginOut`, :class:`RefreshIn`,
      :class:`TokenPairOut`

- User service (from ``cmdb.services.users``)
    * :class:`UserService`
    * DTOs: :class:`UserCreateIn`

Per-app service instances live in :mod:`cmdb.services.registry`, which is not
re-exported here because it depends on the infrastructure adapters.
"""

from __future__ import annotations

from ._shared.base import BaseService
from ._shared.dto import Principal, TokenClaims, UserOut
from .session.dto import LoginIn, LoginOut, RefreshIn, TokenPairOut
from .session.service import SessionService
from .users.service import UserCreateIn, UserService

__all__ = [
    # Base
    "BaseService",
    # Shared DTOs
    "Principal",
    "TokenClaims",
    "UserOut",
    # Session
    "SessionService",
    "LoginIn",
    "LoginOut",
    "RefreshIn",
    "TokenPairOut",
    # Users
    "UserService",
    "UserCreateIn",
]
