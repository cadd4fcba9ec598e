"""Authentication endpoints: login, refresh, logout and validate."""

from __future__ import annotations

from flask import Blueprint, request

from cmdb.api.deps import authenticate, get_session_service, json_response, timing
from cmdb.schemas import (
    LoginResponseSchema,
    LoginSchema,
    MessageSchema,
    PrincipalSchema,
    RefreshSchema,
    TokenPairSchema,
)
from cmdb.services._shared.dto import Principal
from cmdb.services.session.dto import LoginIn, RefreshIn

bp = Blueprint("auth", __name__)

login_schema = LoginSchema()
refresh_schema = RefreshSchema()
login_response_schema = LoginResponseSchema()
token_pair_schema = TokenPairSchema()
principal_schema = PrincipalSchema()
message_schema = MessageSchema()


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access/refresh pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    service = get_session_service()
    with service.translated_errors():
        result = service.login(LoginIn(username=data["username"], password=data["password"]))
    return json_response(login_response_schema.dump(result))


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a refresh token for a new pair; the presented token is spent."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    service = get_session_service()
    with service.translated_errors():
        pair = service.refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response(token_pair_schema.dump(pair))


@bp.post("/logout")
@timing
@authenticate
def logout(principal: Principal):
    """Revoke every refresh token of the caller."""

    service = get_session_service()
    with service.translated_errors():
        service.logout(principal)
    return json_response(message_schema.dump({"message": "Successfully logged out"}))


@bp.get("/validate")
@timing
@authenticate
def validate(principal: Principal):
    """Return the identity carried by the bearer token."""

    return json_response({"user": principal_schema.dump(principal)})
