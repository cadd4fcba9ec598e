"""Version 1 routes: health, session lifecycle and the user directory."""

from __future__ import annotations

from flask import Blueprint

API_VERSION = "v1"

from .auth import bp as auth_bp  # noqa: E402
from .health import bp as health_bp  # noqa: E402
from .users import bp as users_bp  # noqa: E402

# (blueprint, prefix relative to /api/v1)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (auth_bp, "/auth"),
    (users_bp, "/users"),
]
