from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime

from cmdb.core import errors as api_errors
from cmdb.models.base import utcnow
from cmdb.services._shared.deadline import Deadline
from cmdb.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DeadlineExceeded,
    NotFoundError,
    ServiceError,
    TokenError,
)
from cmdb.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

Clock = Callable[[], datetime]


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Own the clock so that time-dependent rules are testable.
    * Centralize error translation to API errors.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Services never import Flask request state; the API layer passes
      everything explicitly.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, clock: Clock | None = None, timeout_seconds: float | None = None) -> None:
        """
        :param clock: Returns the current aware UTC time. Defaults to :func:`utcnow`.
        :param timeout_seconds: Default per-operation deadline; ``None`` disables it.
        """
        self.clock: Clock = clock or utcnow
        self.timeout_seconds = timeout_seconds

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # --------------------------- Time helpers --------------------------------

    def now(self) -> datetime:
        return self.clock()

    def deadline(self, deadline: Deadline | None = None) -> Deadline | None:
        """Return ``deadline`` or a fresh one from ``timeout_seconds``."""
        if deadline is not None:
            return deadline
        return Deadline.after(self.timeout_seconds)

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, AuthenticationError):
            # → 401, message is already generic
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, TokenError):
            # → 401; expired vs invalid stays in the logs
            return api_errors.Unauthorized("Invalid or expired token")

        if isinstance(exc, AuthorizationError):
            return api_errors.Forbidden(str(exc))

        if isinstance(exc, DeadlineExceeded):
            # → 503, retryable by the client
            return api_errors.ServiceUnavailable(str(exc))

        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(
                message=str(exc),
                status_code=400,
                code="bad_request",
            )

        return exc

    @contextmanager
    def translated_errors(self) -> Iterator[None]:
        """Re-raise any :class:`ServiceError` from the block as its API error."""
        try:
            yield
        except ServiceError as exc:
            raise self.translate_exceptions(exc) from exc
