"""Units of work on a plain Flask-SQLAlchemy session (no outer transaction)."""

from __future__ import annotations

from cmdb.core.extensions import db
from cmdb.models.role import Role
from cmdb.models.user import User
from cmdb.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def test_read_only_uow_owns_and_closes_its_transaction(file_app, alice):
    with file_app.app_context():
        assert not db.session().in_transaction()

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            assert uow._txn_ctx is not None
            assert uow.users.get_by_username("alice") is not None

        assert not db.session().in_transaction()


def test_read_write_uow_after_read_only_uow_on_the_same_session(file_app, alice):
    """
    GIVEN a read-only UoW that began and ended its own transaction
    WHEN a read-write UoW runs next on the same scoped session
    THEN the write commits and is visible from a fresh context.
    """
    with file_app.app_context():
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            assert uow.users.get_by_username("bob") is None

        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(User(username="bob", password_hash="x", role=Role.VIEWER))

    with file_app.app_context():
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            bob = uow.users.get_by_username("bob")
            assert bob is not None
            assert bob.role is Role.VIEWER
