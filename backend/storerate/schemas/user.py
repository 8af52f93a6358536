"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from .auth import RegisterSchema


class UserCreateSchema(RegisterSchema):
    """Payload for creating a user of any role from the admin surface."""


class UserQuerySchema(Schema):
    """Supported query parameters for listing users."""

    class Meta:
        unknown = EXCLUDE

    search = fields.String(load_default=None)
    sort_by = fields.String(
        data_key="sortBy", load_default="name", validate=validate.OneOf(["name", "email", "role"])
    )
    order = fields.String(load_default="asc", validate=validate.OneOf(["asc", "desc"]))


class UserSchema(Schema):
    """Public representation of a user entity."""

    id = fields.Integer(required=True)
    name = fields.String(required=True)
    email = fields.Email(required=True)
    address = fields.String(allow_none=True)
    role = fields.String(required=True)
