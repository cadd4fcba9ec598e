"""Fixtures for tests that run against a file-backed SQLite database.

These tests exercise the units of work the way a deployment does: every
request or ``app_context`` gets its own session and connection, and nothing
wraps them in an outer transaction.
"""

from __future__ import annotations

import pytest

from cmdb.core.config import TestingConfig
from cmdb.core.extensions import db as _db
from cmdb.factory import create_app
from cmdb.services.registry import get_user_service
from cmdb.services.users.service import UserCreateIn
from tests.factories.user import DEFAULT_PASSWORD as PASSWORD


@pytest.fixture(autouse=True)
def _factories_session():
    """Factories are not bound here; rows are created through the services."""
    yield


@pytest.fixture()
def file_app(tmp_path):
    """Application bound to ``<tmp_path>/auth.db`` with the tables created."""
    config = type(
        "FileTestingConfig",
        (TestingConfig,),
        {"SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'auth.db'}"},
    )
    app = create_app(config)
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()


@pytest.fixture()
def alice(file_app):
    """A committed user able to log in with :data:`PASSWORD`."""
    with file_app.app_context():
        return get_user_service().create_user(UserCreateIn(username="alice", password=PASSWORD))
