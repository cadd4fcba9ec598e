"""HTTP helpers shared by the API tests."""

from __future__ import annotations

from typing import Any

LOGIN_URL = "/api/v1/auth/login"
REFRESH_URL = "/api/v1/auth/refresh"
LOGOUT_URL = "/api/v1/auth/logout"
VALIDATE_URL = "/api/v1/auth/validate"
USERS_URL = "/api/v1/users"


def bearer(token: str) -> dict[str, str]:
    """Return an ``Authorization`` header for ``token``."""
    return {"Authorization": f"Bearer {token}"}


def login(client, username: str, password: str) -> Any:
    """POST credentials and return the response."""
    return client.post(LOGIN_URL, json={"username": username, "password": password})


def assert_problem(response, status: int, detail: str | None = None) -> dict[str, Any]:
    """Assert an RFC 7807 response with ``status`` (and ``detail`` when given)."""
    assert response.status_code == status, response.get_json()
    assert response.mimetype == "application/problem+json"
    body = response.get_json()
    assert body["status"] == status
    if detail is not None:
        assert body["detail"] == detail
    return body
