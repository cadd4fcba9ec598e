"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from cmdb.core.config import PLACEHOLDER_SECRETS, BaseConfig, get_config
from cmdb.core.logger import configure_logging
from cmdb.core.logger import init_app as init_logging

MIN_JWT_SECRET_BYTES = 32


def _check_secrets(app: Flask) -> None:
    """Refuse to start with placeholder signing keys where strong ones are required.

    :raises RuntimeError: If ``REQUIRE_STRONG_SECRETS`` is set and the JWT key
        is a placeholder or shorter than :data:`MIN_JWT_SECRET_BYTES`.
    """
    if not app.config.get("REQUIRE_STRONG_SECRETS"):
        return
    secret = str(app.config.get("JWT_SECRET_KEY") or "")
    if secret in PLACEHOLDER_SECRETS or len(secret.encode("utf-8")) < MIN_JWT_SECRET_BYTES:
        raise RuntimeError(
            f"JWT_SECRET_KEY must be set to at least {MIN_JWT_SECRET_BYTES} bytes of secret data."
        )


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application."""

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    _check_secrets(app)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from cmdb.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from cmdb.api import init_app as init_api

    init_api(app)

    from cmdb.core import errors

    errors.init_app(app)

    from cmdb import cli as app_cli

    app_cli.init_app(app)

    return app
