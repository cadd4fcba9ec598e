"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginResponseSchema,
    LoginSchema,
    MessageSchema,
    PrincipalSchema,
    RefreshSchema,
    TokenPairSchema,
)
from .user import UserCreateSchema, UserListQuerySchema, UserSchema

__all__ = [
    "LoginSchema",
    "LoginResponseSchema",
    "MessageSchema",
    "PrincipalSchema",
    "RefreshSchema",
    "TokenPairSchema",
    "UserSchema",
    "UserCreateSchema",
    "UserListQuerySchema",
]
