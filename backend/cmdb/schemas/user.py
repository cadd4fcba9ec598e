"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from cmdb.models.role import Role


class UserCreateSchema(Schema):
    """Payload for creating a new user from the admin surface."""

    username = fields.String(required=True, validate=validate.Length(min=3, max=50))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))
    email = fields.Email(load_default=None, validate=validate.Length(max=254))
    role = fields.Enum(Role, by_value=True, load_default=Role.USER)


class UserListQuerySchema(Schema):
    """Supported query parameters for listing users."""

    class Meta:
        unknown = EXCLUDE

    sort = fields.String(load_default="username", validate=validate.Length(min=1, max=64))
    limit = fields.Integer(load_default=100, validate=validate.Range(min=1, max=500))
    offset = fields.Integer(load_default=0, validate=validate.Range(min=0))


class UserSchema(Schema):
    """Public representation of a user entity (no password hash)."""

    id = fields.UUID(required=True)
    username = fields.String(required=True)
    email = fields.Email(allow_none=True)
    role = fields.Enum(Role, by_value=True, required=True)
    created_at = fields.DateTime(allow_none=True)
