"""Flask extension singletons shared across the application."""

from __future__ import annotations

from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

# Constraint names follow these patterns, e.g. ``uq_users_username``.
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
    session_options={"autoflush": False},
)
migrate = Migrate(render_as_batch=True)


def init_app(app: Flask) -> None:
    """Bind the database and ``flask db`` migrations to ``app``.

    Imports :mod:`cmdb.models` so ``users`` and ``refresh_tokens`` are on the
    metadata before ``create_all`` or autogenerate runs.
    """
    db.init_app(app)

    from cmdb import models  # noqa: F401

    migrate.init_app(app, db)
