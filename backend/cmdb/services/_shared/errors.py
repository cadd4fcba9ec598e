"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories, the
token codec and application services.

The translation to HTTP responses (RFC 7807) is handled by
``cmdb/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL includes the constraint name in the message; SQLite only names
    the column, so callers may pass either.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        Constraint or column name to look for (e.g., 'uq_users_username').

    Returns
    -------
    bool
        True if the IntegrityError mentions the given name.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    - ``BaseService.translate_exceptions`` later maps them to APIError.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class AuthenticationError(ServiceError):
    """
    Raised when credentials or a token cannot be accepted.

    The message is deliberately generic; the precise reason is logged, never
    returned to the caller.
    """

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class AuthorizationError(ServiceError):
    """Raised when an authenticated principal lacks the required role."""

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message)


class DeadlineExceeded(ServiceError):
    """Raised when an operation runs past its caller-supplied deadline."""

    def __init__(self, message: str = "Operation timed out") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Token errors
# --------------------------------------------------------------------------- #


class TokenError(ServiceError):
    """Base class for token verification failures."""


class InvalidToken(TokenError):
    """Malformed token, bad signature, wrong algorithm or claims out of shape."""

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class TokenExpired(TokenError):
    """Signature is valid but the validity window has elapsed."""

    def __init__(self, message: str = "Token has expired") -> None:
        super().__init__(message)
