"""Closed set of roles a principal can hold."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role attached to every user and every token.

    Values are the wire representation used in JWT claims, request payloads
    and the ``users.role`` column.
    """

    ADMIN = "admin"
    USER = "user"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value: object) -> Role:
        """Convert a raw value into a :class:`Role`.

        :param value: Raw value (usually a string from a claim or payload).
        :returns: Matching role.
        :raises ValueError: If ``value`` is not one of the known roles. There is
            no fallback role: unknown values are rejected, never widened.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Role must be a string, got {type(value).__name__}")
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]
