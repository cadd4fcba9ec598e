"""Shared API helpers: responses, timing, service wiring and the authorization gate."""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from cmdb.core.errors import Forbidden, Unauthorized
from cmdb.models.role import Role
from cmdb.services._shared.dto import Principal
from cmdb.services.registry import get_session_service, get_user_service

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)

__all__ = [
    "admin_only",
    "admin_or_viewer",
    "authenticate",
    "authorize",
    "bearer_token",
    "current_principal",
    "get_session_service",
    "get_user_service",
    "json_response",
    "timing",
]


# --------------------------------------------------------------------------- #
# Responses
# --------------------------------------------------------------------------- #


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


def bearer_token() -> str:
    """Extract the token from ``Authorization: Bearer <token>``.

    :raises Unauthorized: When the header is missing or malformed.
    """

    header = request.headers.get("Authorization", "")
    if not header:
        raise Unauthorized("Authorization header required")
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthorized("Invalid authorization header format")
    return parts[1]


def current_principal() -> Principal | None:
    """Return the principal attached to the current request, if any."""

    return g.get("principal")


def authenticate(func: F) -> F:
    """Verify the bearer token and pass the principal to the view.

    The view receives it as the ``principal`` keyword argument; it is also
    available through :func:`current_principal` for the rest of the request.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = bearer_token()
        service = get_session_service()
        with service.translated_errors():
            principal = service.validate_token(token)
        g.principal = principal
        return func(*args, principal=principal, **kwargs)

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Authorization gate
# --------------------------------------------------------------------------- #


def authorize(*allowed_roles: Role | str) -> Callable[[F], F]:
    """Allow the view only for principals holding one of ``allowed_roles``.

    Never parses tokens: the principal comes from :func:`authenticate`.
    Missing principal is a 401, a principal with another role is a 403.

    :raises ValueError: At decoration time, for an unknown role.
    """

    allowed = frozenset(Role.parse(role) for role in allowed_roles)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            principal = kwargs.get("principal") or current_principal()
            if principal is None:
                raise Unauthorized("Not authenticated")
            if principal.role not in allowed:
                log.warning(
                    "auth.forbidden",
                    extra={
                        "event": "auth.forbidden",
                        "user_id": str(principal.user_id),
                        "reason": f"role={principal.role.value}",
                    },
                )
                raise Forbidden("Insufficient permissions")
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def admin_only() -> Callable[[F], F]:
    return authorize(Role.ADMIN)


def admin_or_viewer() -> Callable[[F], F]:
    return authorize(Role.ADMIN, Role.VIEWER)
