"""Factory Boy base wired to the per-test transactional session."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Holder for the session installed by the ``_factories_session`` fixture."""

    _session = None

    @classmethod
    def set(cls, session) -> None:
        cls._session = session

    @classmethod
    def get(cls):
        """Return the installed session.

        :raises RuntimeError: When a factory runs outside the DB fixtures.
        """
        if cls._session is None:
            raise RuntimeError("No factory session installed; request the 'session' fixture.")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Persist through the test session and commit each created object."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        # Services commit and roll back through units of work; committed
        # fixtures survive a rolled back service call.
        sqlalchemy_session_persistence = "commit"
