"""Unit tests for BaseService error translation and time helpers."""

from datetime import UTC, datetime

import pytest

from cmdb.core import errors as api_errors
from cmdb.services._shared.base import BaseService
from cmdb.services._shared.deadline import Deadline
from cmdb.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DeadlineExceeded,
    InvalidToken,
    NotFoundError,
    ServiceError,
    TokenExpired,
)


@pytest.mark.parametrize(
    ("exc", "expected", "status"),
    [
        (AuthenticationError("Invalid username or password"), api_errors.Unauthorized, 401),
        (InvalidToken(), api_errors.Unauthorized, 401),
        (TokenExpired(), api_errors.Unauthorized, 401),
        (AuthorizationError(), api_errors.Forbidden, 403),
        (DeadlineExceeded(), api_errors.ServiceUnavailable, 503),
        (NotFoundError("User", "ghost"), api_errors.NotFound, 404),
        (ConflictError("User", "username already in use"), api_errors.Conflict, 409),
        (ServiceError("anything else"), api_errors.APIError, 400),
    ],
)
def test_translate_exceptions(exc, expected, status):
    translated = BaseService().translate_exceptions(exc)

    assert isinstance(translated, expected)
    assert translated.status_code == status


def test_token_errors_share_one_message():
    service = BaseService()
    expired = service.translate_exceptions(TokenExpired())
    invalid = service.translate_exceptions(InvalidToken())

    assert expired.message == invalid.message == "Invalid or expired token"


def test_foreign_exceptions_pass_through():
    boom = RuntimeError("boom")
    assert BaseService().translate_exceptions(boom) is boom


def test_translated_errors_context_manager():
    with pytest.raises(api_errors.Unauthorized) as info:
        with BaseService().translated_errors():
            raise AuthenticationError("Invalid username or password")

    assert info.value.message == "Invalid username or password"
    assert isinstance(info.value.__cause__, AuthenticationError)


def test_clock_and_default_deadline():
    fixed = datetime(2030, 1, 1, tzinfo=UTC)
    service = BaseService(clock=lambda: fixed, timeout_seconds=5)

    assert service.now() == fixed
    assert isinstance(service.deadline(), Deadline)

    explicit = Deadline.after(1)
    assert service.deadline(explicit) is explicit
    assert BaseService().deadline() is None
