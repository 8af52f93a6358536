"""Rating resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields


class RatingSubmitSchema(Schema):
    """Rating submission; range and comment length are checked by the service."""

    class Meta:
        unknown = EXCLUDE

    user_id = fields.Integer(required=True)
    store_id = fields.Integer(required=True)
    rating = fields.Integer(required=True, strict=True)
    comment = fields.String(load_default=None, allow_none=True)


class RatingAckSchema(Schema):
    id = fields.Integer(required=True)
    user_id = fields.Integer(required=True)
    store_id = fields.Integer(required=True)
    rating = fields.Integer(attribute="value", required=True)
    comment = fields.String(allow_none=True)
    rated_at = fields.DateTime(required=True)
    created = fields.Boolean(required=True)


class UserRatingSchema(Schema):
    """A user's own rating joined with the rated store."""

    id = fields.Integer(required=True)
    store_id = fields.Integer(required=True)
    store_name = fields.String(required=True)
    store_address = fields.String(required=True)
    rating = fields.Integer(attribute="value", required=True)
    comment = fields.String(allow_none=True)
    rated_at = fields.DateTime(required=True)


class OwnerRatingSchema(Schema):
    """A rating on one of an owner's stores, joined with the rater."""

    id = fields.Integer(required=True)
    store_id = fields.Integer(required=True)
    store_name = fields.String(required=True)
    user_id = fields.Integer(required=True)
    user_name = fields.String(required=True)
    user_email = fields.String(required=True)
    rating = fields.Integer(attribute="value", required=True)
    comment = fields.String(allow_none=True)
    rated_at = fields.DateTime(required=True)


class StatsSchema(Schema):
    total_users = fields.Integer(required=True)
    total_stores = fields.Integer(required=True)
    total_ratings = fields.Integer(required=True)
