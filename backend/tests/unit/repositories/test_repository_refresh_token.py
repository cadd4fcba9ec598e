"""Unit tests for RefreshTokenRepository."""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from cmdb.models.base import utcnow
from cmdb.repositories.refresh_token import RefreshTokenRepository
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


class TestRefreshTokenRepository:
    @pytest.fixture()
    def repo(self, session):
        return RefreshTokenRepository(session=session)

    def test_create_and_get_by_hash(self, repo):
        user = UserFactory()
        expires = utcnow() + timedelta(days=7)

        row = repo.create(user_id=user.id, token_hash="a" * 64, expires_at=expires)

        fetched = repo.get_by_token_hash("a" * 64)
        assert fetched is row
        assert fetched.revoked_at is None
        assert repo.get_by_token_hash("b" * 64) is None

    def test_create_duplicate_hash_conflicts(self, repo, session):
        existing = RefreshTokenFactory()

        with pytest.raises(IntegrityError):
            repo.create(
                user_id=existing.user_id,
                token_hash=existing.token_hash,
                expires_at=utcnow() + timedelta(days=1),
            )
        session.rollback()

    def test_revoke_is_a_compare_and_set(self, repo, session):
        row = RefreshTokenFactory()
        now = utcnow()

        assert repo.revoke(row.id, now=now) is True
        assert repo.revoke(row.id, now=now) is False

        session.refresh(row)
        assert row.revoked_at is not None

    def test_revoke_unknown_row_is_false(self, repo):
        assert repo.revoke(uuid.uuid4(), now=utcnow()) is False

    def test_revoke_all_for_user_only_touches_active_rows(self, repo, session):
        user = UserFactory()
        other = RefreshTokenFactory()
        RefreshTokenFactory(user=user)
        RefreshTokenFactory(user=user)
        RefreshTokenFactory(user=user, revoked_at=utcnow() - timedelta(hours=1))

        assert repo.revoke_all_for_user(user.id, now=utcnow()) == 2
        assert repo.revoke_all_for_user(user.id, now=utcnow()) == 0

        session.expire_all()
        assert other.revoked_at is None
        assert all(r.revoked_at is not None for r in repo.list_for_user(user.id))

    def test_list_for_user_filters_usable_rows(self, repo):
        now = utcnow()
        user = UserFactory()
        active = RefreshTokenFactory(user=user)
        RefreshTokenFactory(user=user, revoked_at=now)
        RefreshTokenFactory(user=user, expires_at=now - timedelta(seconds=1))

        assert len(repo.list_for_user(user.id)) == 3
        assert [r.id for r in repo.list_for_user(user.id, usable_at=now)] == [active.id]

    def test_clean_expired_keeps_recently_revoked_rows(self, repo, session):
        now = utcnow()
        user = UserFactory()
        active = RefreshTokenFactory(user=user)
        RefreshTokenFactory(user=user, expires_at=now - timedelta(minutes=1))
        recent = RefreshTokenFactory(user=user, revoked_at=now - timedelta(hours=1))
        RefreshTokenFactory(user=user, revoked_at=now - timedelta(hours=48))

        removed = repo.clean_expired(now=now, retention=timedelta(hours=24))

        assert removed == 2
        session.expire_all()
        remaining = {r.id for r in repo.list_for_user(user.id)}
        assert remaining == {active.id, recent.id}

    def test_clean_expired_without_retention_drops_every_revoked_row(self, repo):
        now = utcnow()
        user = UserFactory()
        RefreshTokenFactory(user=user, revoked_at=now - timedelta(seconds=1))
        kept = RefreshTokenFactory(user=user)

        assert repo.clean_expired(now=now) == 1
        assert [r.id for r in repo.list_for_user(user.id)] == [kept.id]
