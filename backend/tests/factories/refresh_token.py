"""Factory Boy definition for :class:`cmdb.models.refresh_token.RefreshToken`."""

from __future__ import annotations

import hashlib
from datetime import timedelta

import factory

from cmdb.models.base import utcnow
from cmdb.models.refresh_token import RefreshToken
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class RefreshTokenFactory(BaseFactory):
    """Build persisted, usable refresh-token rows owned by a fresh user."""

    class Meta:
        model = RefreshToken

    user = factory.SubFactory(UserFactory)
    token_hash = factory.Sequence(lambda n: hashlib.sha256(f"refresh-{n}".encode()).hexdigest())
    expires_at = factory.LazyFunction(lambda: utcnow() + timedelta(days=7))
    revoked_at = None
