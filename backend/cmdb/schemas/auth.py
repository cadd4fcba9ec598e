"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from .user import UserSchema


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    """Input payload carrying the refresh token to rotate."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class TokenPairSchema(Schema):
    """Response payload containing a freshly issued token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)


class LoginResponseSchema(TokenPairSchema):
    """Response payload for a successful login."""

    user = fields.Nested(UserSchema, required=True)


class PrincipalSchema(Schema):
    """Identity carried by a verified access token."""

    user_id = fields.UUID(required=True)
    username = fields.String(required=True)
    role = fields.Function(lambda p: p.role.value)


class MessageSchema(Schema):
    message = fields.String(required=True)
