"""Transaction boundary used by the auth services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cmdb.repositories import RefreshTokenRepository, UserRepository


class UnitOfWork(ABC):
    """
    One transaction, shared by every repository it hands out.

    A refresh rotation revokes the presented row and inserts its successor
    through ``refresh_tokens`` inside a single ``with`` block: both writes
    land, or neither does.
    """

    users: UserRepository
    refresh_tokens: RefreshTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
