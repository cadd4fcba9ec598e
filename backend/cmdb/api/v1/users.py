"""User directory endpoints (admin surface)."""

from __future__ import annotations

from flask import Blueprint, request

from cmdb.api.deps import (
    admin_only,
    admin_or_viewer,
    authenticate,
    get_user_service,
    json_response,
    timing,
)
from cmdb.schemas import UserCreateSchema, UserListQuerySchema, UserSchema
from cmdb.services._shared.dto import Principal
from cmdb.services.users.service import UserCreateIn

bp = Blueprint("users", __name__)

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
user_create_schema = UserCreateSchema()
user_query_schema = UserListQuerySchema()


@bp.get("")
@timing
@authenticate
@admin_or_viewer()
def list_users(principal: Principal):
    """Return users ordered by the requested key."""

    query = user_query_schema.load(request.args)
    service = get_user_service()
    with service.translated_errors():
        items = service.list_users(
            sort=[query["sort"]], limit=query["limit"], offset=query["offset"]
        )
    meta = {"limit": query["limit"], "offset": query["offset"], "count": len(items)}
    return json_response({"data": user_list_schema.dump(items), "meta": meta})


@bp.post("")
@timing
@authenticate
@admin_only()
def create_user(principal: Principal):
    """Create a user with an explicit role."""

    payload = user_create_schema.load(request.get_json(silent=True) or {})
    service = get_user_service()
    with service.translated_errors():
        user = service.create_user(UserCreateIn(**payload))
    return json_response({"data": user_schema.dump(user)}, status=201)
