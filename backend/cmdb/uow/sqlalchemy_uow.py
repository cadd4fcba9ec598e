"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction, scoped_session

from cmdb.core.extensions import db
from cmdb.repositories import RefreshTokenRepository, UserRepository
from cmdb.uow.base import UnitOfWork

_TRANSACTION_DIALECTS = ("postgresql", "mysql", "mariadb")


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    Everything done inside one ``with`` block commits together or not at all;
    the refresh rotation (revoke old row, insert new row) relies on this.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    This UoW:
    - Sets the isolation level and ``READ ONLY`` on PostgreSQL/MySQL when it
      owns the transaction.
    - Blocks ORM flushes carrying new/dirty/deleted objects.
    - Always rolls back on exit when it owns the transaction.
    - Disallows ``commit()``.

    When a transaction is already running on the session (tests, or a caller
    that already read something) the UoW attaches to it instead of failing;
    the flush guard still applies but ``SET TRANSACTION`` is skipped.

    Parameters
    ----------
    isolation_level:
        Optional isolation hint, e.g. ``"READ COMMITTED"``.
    enforce_db_readonly:
        Apply ``SET TRANSACTION READ ONLY`` when supported.
    """

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._txn_ctx: SessionTransaction | None = None
        self._guard_installed = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn_ctx = None
        try:
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx
        except InvalidRequestError:
            # Already inside a transaction: attach to it.
            pass

        self._install_guard()

        if self._txn_ctx is not None:
            self._apply_transaction_directives()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn_ctx is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                # Leave the begin() context entered in __enter__; the session
                # refuses new statements until it is popped.
                try:
                    self._txn_ctx.__exit__(exc_type, exc, tb)
                finally:
                    self._txn_ctx = None
        finally:
            self._remove_guard()

    def commit(self) -> None:
        """
        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- internals ---------------------------------

    def _apply_transaction_directives(self) -> None:
        dialect = self.session.connection().dialect.name
        if dialect not in _TRANSACTION_DIALECTS:
            return
        try:
            if self.isolation_level:
                iso = self.isolation_level.upper().strip()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {iso}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            current_app.logger.warning(
                "SET TRANSACTION directives failed (%s). Falling back to guards-only.", exc
            )

    def _install_guard(self) -> None:
        if self._guard_installed:
            return

        def _before_flush(session, flush_context, instances):
            if session.new or session.dirty or session.deleted:
                raise RuntimeError(
                    "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
                )

        target = self._session_instance()
        event.listen(target, "before_flush", _before_flush)
        self._guard_target = target
        self._ro_before_flush = _before_flush
        self._guard_installed = True

    def _remove_guard(self) -> None:
        if not self._guard_installed:
            return
        with suppress(InvalidRequestError):
            event.remove(self._guard_target, "before_flush", self._ro_before_flush)
        self._guard_installed = False

    def _session_instance(self) -> Session:
        # Listen on this thread's Session only, not on every session of the factory.
        if isinstance(self.session, scoped_session):
            return self.session()
        return self.session
