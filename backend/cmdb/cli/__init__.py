"""``flask`` command groups shipped with the auth core."""

from __future__ import annotations

from flask import Flask

from .auth import auth_cli


def init_app(app: Flask) -> None:
    """Expose ``flask auth ...`` (user bootstrap, revocation, token sweep)."""
    app.cli.add_command(auth_cli)
