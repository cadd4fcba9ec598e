"""HTTP surface of the auth core, mounted under ``API_BASE_PREFIX``/<version>."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join(*segments: str) -> str:
    return "/" + "/".join(s.strip("/") for s in segments if s.strip("/"))


def register_blueprint_group(
    app: Flask, *, base_prefix: str, entries: Iterable[tuple[Blueprint, str]]
) -> None:
    """Register ``(blueprint, relative_prefix)`` pairs below ``base_prefix``.

    An empty relative prefix mounts the blueprint at the version root.
    """
    for blueprint, relative in entries:
        app.register_blueprint(blueprint, url_prefix=_join(base_prefix, relative))


def init_app(app: Flask) -> None:
    from cmdb.api.v1 import API_VERSION, REGISTRY

    base = _join(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION)
    register_blueprint_group(app, base_prefix=base, entries=REGISTRY)


__all__ = ["init_app", "register_blueprint_group"]
