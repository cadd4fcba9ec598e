"""Per-application service instances built from Flask config."""

from __future__ import annotations

from flask import current_app

from cmdb.infra.jwt import JWTTokenCodec
from cmdb.infra.security import CredentialVerifier
from cmdb.services.session.service import SessionService
from cmdb.services.users.service import UserService

SESSION_SERVICE_KEY = "cmdb.session_service"
USER_SERVICE_KEY = "cmdb.user_service"


def get_credential_verifier() -> CredentialVerifier:
    return CredentialVerifier(method=current_app.config["PASSWORD_HASH_METHOD"])


def get_session_service() -> SessionService:
    """Return the app-wide :class:`SessionService`, building it on first use.

    Services keep no request state, so one instance serves every request.
    Tests may pre-seed ``app.extensions[SESSION_SERVICE_KEY]`` with a service
    using a fixed clock.
    """
    service = current_app.extensions.get(SESSION_SERVICE_KEY)
    if service is None:
        config = current_app.config
        service = SessionService(
            codec=JWTTokenCodec.from_config(config),
            verifier=get_credential_verifier(),
            timeout_seconds=config.get("AUTH_OPERATION_TIMEOUT_SECONDS"),
        )
        current_app.extensions[SESSION_SERVICE_KEY] = service
    return service


def get_user_service() -> UserService:
    service = current_app.extensions.get(USER_SERVICE_KEY)
    if service is None:
        service = UserService(verifier=get_credential_verifier())
        current_app.extensions[USER_SERVICE_KEY] = service
    return service
