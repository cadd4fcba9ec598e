"""Password hashing and verification backed by ``werkzeug.security``."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field

from werkzeug.security import check_password_hash, generate_password_hash

log = logging.getLogger(__name__)

DEFAULT_METHOD = "scrypt:32768:8:1"


@dataclass(slots=True)
class CredentialVerifier:
    """
    Hash and check passwords with a fixed, configurable work factor.

    ``method`` is a werkzeug method string such as ``"scrypt:32768:8:1"`` or
    ``"pbkdf2:sha256:600000"``; the cost parameters are part of it. Every hash
    gets a fresh random salt.

    :param method: werkzeug hashing method (algorithm + work factor).
    :param salt_length: Salt length in characters.
    """

    method: str = DEFAULT_METHOD
    salt_length: int = 16
    _dummy_hash: str | None = field(default=None, init=False, repr=False)

    def hash_password(self, plaintext: str) -> str:
        """
        Return a salted hash of ``plaintext``.

        :raises ValueError: If ``plaintext`` is empty or not a string.
        """
        if not isinstance(plaintext, str) or not plaintext:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(plaintext, method=self.method, salt_length=self.salt_length)

    def check_password(self, plaintext: str, password_hash: str) -> bool:
        """
        Return ``True`` only when ``plaintext`` matches ``password_hash``.

        A malformed or unsupported hash yields the same ``False`` as a wrong
        password; the comparison itself is constant-time (``hmac.compare_digest``
        inside werkzeug).
        """
        if not isinstance(plaintext, str) or not password_hash:
            return False
        try:
            return bool(check_password_hash(password_hash, plaintext))
        except (ValueError, TypeError):
            log.warning("credentials.malformed_hash", extra={"event": "credentials.malformed_hash"})
            return False

    def burn_check(self, plaintext: str) -> None:
        """
        Spend one verification against a throwaway hash.

        Called when the username is unknown so that the response time of a
        failed login does not reveal whether the account exists.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash_password(secrets.token_urlsafe(16))
        self.check_password(plaintext if isinstance(plaintext, str) else "", self._dummy_hash)
