"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

import pytest

from cmdb.models import RefreshToken, User
from cmdb.models.base import utcnow
from cmdb.uow import SQLAlchemyUnitOfWork
from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN we create a user via repo inside the context and leave without exception
        THEN the transaction is committed and the row is visible afterwards.
        """
        initial = session.query(User).count()

        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())

        assert session.query(User).count() == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN the transaction is rolled back and no rows are persisted.
        """
        initial = session.query(User).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")

        assert session.query(User).count() == initial

    def test_both_repositories_share_one_transaction(self, app, db, session):
        """A failure after writes through two repositories undoes both."""
        user = UserFactory()
        user_id = user.id

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.refresh_tokens.create(
                user_id=user_id, token_hash="c" * 64, expires_at=utcnow()
            )
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")

        assert session.query(RefreshToken).filter_by(user_id=user_id).count() == 0
        assert session.query(User).count() == 1
