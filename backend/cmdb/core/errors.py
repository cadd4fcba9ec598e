"""RFC 7807 (``application/problem+json``) error responses for the API.

Every failure leaves the API as a problem document carrying a stable ``code``
and the request's correlation id. Authentication failures are rendered with
the generic message chosen by the service; the precise reason stays in logs.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from cmdb.core.logger import ensure_request_id

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    415: "unsupported_media_type",
    500: "internal_server_error",
    503: "service_unavailable",
}


def problem(
    status: int, code: str, detail: str, *, details: dict[str, Any] | None = None
) -> Response:
    """Build a problem+json response.

    :param status: HTTP status.
    :param code: Stable machine-readable code.
    :param detail: Client-safe message.
    :param details: Optional structured payload (validation messages).
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "code": code,
        "instance": request.path,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    response = jsonify(body)
    response.status_code = status
    response.mimetype = PROBLEM_MIMETYPE
    if status == HTTPStatus.UNAUTHORIZED:
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


class APIError(Exception):
    """An error the API reports to the client as-is.

    :param message: Client-safe description, rendered as ``detail``.
    :param status_code: HTTP status.
    :param code: Machine-readable code.
    :param details: Optional structured payload.
    """

    status_code = HTTPStatus.BAD_REQUEST
    code = "bad_request"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code or type(self).status_code)
        self.code = code or type(self).code
        self.details = details or {}


class NotFound(APIError):
    status_code = HTTPStatus.NOT_FOUND
    code = "not_found"


class Conflict(APIError):
    status_code = HTTPStatus.CONFLICT
    code = "conflict"


class Unauthorized(APIError):
    """401: missing, malformed, invalid or expired credentials."""

    status_code = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"


class Forbidden(APIError):
    """403: authenticated, but the role is not allowed."""

    status_code = HTTPStatus.FORBIDDEN
    code = "forbidden"


class ServiceUnavailable(APIError):
    """503: the operation ran out of time; the client may retry."""

    status_code = HTTPStatus.SERVICE_UNAVAILABLE
    code = "service_unavailable"


def init_app(app: Flask) -> None:
    """Register problem+json handlers; 5xx are logged with tracebacks, 4xx as warnings."""

    @app.errorhandler(APIError)
    def _api_error(err: APIError):
        logger = log.error if err.status_code >= 500 else log.warning
        logger("api.error", extra={"event": "api.error", "reason": err.code})
        return problem(err.status_code, err.code, err.message, details=err.details)

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = _CODES.get(status, "error")
        detail = (err.description or HTTPStatus(status).phrase).strip()
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        log.warning("api.http_error", extra={"event": "api.http_error", "reason": code})
        return problem(status, code, detail)

    @app.errorhandler(MarshmallowValidationError)
    def _validation_error(err: MarshmallowValidationError):
        log.warning("api.validation_error", extra={"event": "api.validation_error"})
        return problem(
            HTTPStatus.BAD_REQUEST,
            "validation_error",
            "Validation failed",
            details={"errors": err.messages},
        )

    @app.errorhandler(IntegrityError)
    def _integrity_error(err: IntegrityError):
        log.error("api.integrity_error", extra={"event": "api.integrity_error"}, exc_info=True)
        return problem(HTTPStatus.CONFLICT, "conflict", "Resource conflict")

    @app.errorhandler(OperationalError)
    def _operational_error(err: OperationalError):
        log.error("api.store_unavailable", extra={"event": "api.store_unavailable"}, exc_info=True)
        return problem(
            HTTPStatus.SERVICE_UNAVAILABLE, "service_unavailable", "Service temporarily unavailable"
        )

    @app.errorhandler(Exception)
    def _unexpected_error(err: Exception):
        log.error("api.unhandled", extra={"event": "api.unhandled"}, exc_info=True)
        return problem(HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error")
