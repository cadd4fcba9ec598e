"""Tests for the ``flask auth`` command group."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select

from cmdb.models.base import utcnow
from cmdb.models.refresh_token import RefreshToken
from cmdb.models.role import Role
from cmdb.models.user import User
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def runner(app, session):
    return app.test_cli_runner()


def test_create_user(runner, session):
    result = runner.invoke(
        args=["auth", "create-user", "root", "--role", "admin", "--password", "root-password"]
    )

    assert result.exit_code == 0, result.output
    assert "Created admin 'root'" in result.output
    user = session.scalar(select(User).where(User.username == "root"))
    assert user.role is Role.ADMIN


def test_create_user_prompts_for_the_password(runner, session):
    result = runner.invoke(
        args=["auth", "create-user", "prompted"], input="prompt-pass\nprompt-pass\n"
    )

    assert result.exit_code == 0, result.output
    assert session.scalar(select(User).where(User.username == "prompted")).role is Role.USER


def test_create_user_conflict_is_a_clean_error(runner):
    UserFactory(username="dup")

    result = runner.invoke(args=["auth", "create-user", "dup", "--password", "whatever"])

    assert result.exit_code != 0
    assert "username already in use" in result.output


def test_create_user_rejects_unknown_roles(runner):
    result = runner.invoke(
        args=["auth", "create-user", "x", "--role", "superuser", "--password", "pw"]
    )
    assert result.exit_code == 2


def test_revoke_user(runner, session):
    user = UserFactory(username="leaver")
    RefreshTokenFactory(user=user)
    RefreshTokenFactory(user=user)

    result = runner.invoke(args=["auth", "revoke-user", "leaver"])

    assert result.exit_code == 0, result.output
    assert "Revoked 2 refresh token(s)" in result.output
    session.expire_all()
    assert all(t.revoked_at is not None for t in user.refresh_tokens)


def test_revoke_unknown_user(runner):
    result = runner.invoke(args=["auth", "revoke-user", "ghost"])

    assert result.exit_code == 1
    assert "User not found: ghost" in result.output


def test_clean_expired(runner, session):
    now = utcnow()
    user = UserFactory()
    RefreshTokenFactory(user=user, expires_at=now - timedelta(days=1))
    RefreshTokenFactory(user=user, revoked_at=now - timedelta(hours=2))
    kept = RefreshTokenFactory(user=user)

    result = runner.invoke(args=["auth", "clean-expired", "--retention-hours", "1"])

    assert result.exit_code == 0, result.output
    assert "Removed 2 refresh token row(s)" in result.output
    remaining = session.scalars(select(RefreshToken.id).where(RefreshToken.user_id == user.id))
    assert list(remaining) == [kept.id]
