"""CMDB authentication core.

``cmdb:create_app()`` is the WSGI entry point used by gunicorn and
``flask --app cmdb``.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
