"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from cmdb.core.config import TestingConfig
from cmdb.core.extensions import db as _db  # Flask-SQLAlchemy instance
from cmdb.factory import create_app  # application factory under test
from cmdb.infra.jwt import JWTTokenCodec
from cmdb.infra.security import CredentialVerifier
from cmdb.services.registry import SESSION_SERVICE_KEY
from cmdb.services.session.service import SessionService
from tests.helpers.clock import FrozenClock


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection; automatically rolled
        back after each test.

    Notes
    -----
    Units of work commit and roll back the session; bound to a connection
    that is already inside a transaction, those only release or roll back
    SAVEPOINTs, and the outer transaction is discarded at teardown.
    """
    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) Scoped session bound to the connection
    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    # 3) SAVEPOINT per test
    nested = connection.begin_nested()

    # 4) Re-create SAVEPOINT when the previous nested transaction ends
    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # 5) Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


# -- Auth collaborators ------------------------------------------------------------
@pytest.fixture()
def verifier():
    """Credential verifier using the cheap testing work factor."""
    return CredentialVerifier(method=TestingConfig.PASSWORD_HASH_METHOD)


@pytest.fixture()
def codec():
    """Token codec signed with the testing secret and default lifetimes."""
    return JWTTokenCodec(secret=TestingConfig.JWT_SECRET_KEY)


@pytest.fixture()
def clock():
    """Controllable clock starting at a fixed instant."""
    return FrozenClock(datetime(2030, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture()
def session_service(codec, verifier, clock):
    """Session service driven by :func:`clock`."""
    return SessionService(codec=codec, verifier=verifier, clock=clock)


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture()
def clocked_client(app, client, session_service):
    """Test client whose session service runs on the fixture clock."""
    previous = app.extensions.pop(SESSION_SERVICE_KEY, None)
    app.extensions[SESSION_SERVICE_KEY] = session_service
    try:
        yield client
    finally:
        app.extensions.pop(SESSION_SERVICE_KEY, None)
        if previous is not None:
            app.extensions[SESSION_SERVICE_KEY] = previous


@pytest.fixture()
def freeze_time():
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2030-01-01") as frozen:
    ...         frozen.tick(60)
    """
    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None):
        return _freeze_time(target or "2030-01-01")

    return _factory
