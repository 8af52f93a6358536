"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from storerate.models.user import Role

ROLE_VALUES = [role.value for role in Role]


class RegisterSchema(Schema):
    """Input payload for account registration.

    Only presence and types are checked here; name, address and password
    rules are enforced by the identity service so that every entry point
    reports the same messages.
    """

    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True)
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True)
    address = fields.String(load_default=None, allow_none=True)
    role = fields.String(load_default=Role.USER.value, validate=validate.OneOf(ROLE_VALUES))

    @post_load
    def coerce_role(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data["role"] = Role(data["role"])
        return data


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    class Meta:
        unknown = EXCLUDE

    email = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1))


class RefreshTokenSchema(Schema):
    """Refresh-token exchange; a missing token is reported as 401 by the endpoint."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(data_key="refreshToken", load_default=None, allow_none=True)


class LogoutSchema(Schema):
    """
    Logout payload; the token is optional and logout always succeeds.

    The token is loaded as-is and anything that is not a non-empty string is
    dropped, so a malformed body still logs out.
    """

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.Raw(data_key="refreshToken", load_default=None, allow_none=True)

    @post_load
    def _keep_string_token(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        token = data.get("refresh_token")
        data["refresh_token"] = token if isinstance(token, str) and token.strip() else None
        return data


class PasswordUpdateSchema(Schema):
    """Password change payload. Missing fields are reported by the service."""

    class Meta:
        unknown = EXCLUDE

    user_id = fields.Integer(data_key="userId", load_default=None, allow_none=True)
    current_password = fields.String(data_key="currentPassword", load_default=None, allow_none=True)
    new_password = fields.String(data_key="newPassword", load_default=None, allow_none=True)


class TokenResponseSchema(Schema):
    """Response payload containing issued tokens."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(allow_none=True)
    token_type = fields.String(dump_default="bearer")
