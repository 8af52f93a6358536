"""Store resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class StoreQuerySchema(Schema):
    """Query parameters of the store listing.

    Unknown sort fields and orders are accepted and normalized to
    ``name``/``asc`` by the service.
    """

    class Meta:
        unknown = EXCLUDE

    search = fields.String(load_default=None)
    sort_by = fields.String(data_key="sortBy", load_default=None)
    order = fields.String(load_default=None)
    user_id = fields.Integer(data_key="userId", load_default=None, allow_none=True)


class StoreCreateSchema(Schema):
    """Payload for creating a store (admin)."""

    class Meta:
        unknown = EXCLUDE

    name = fields.String(load_default=None, allow_none=True)
    address = fields.String(load_default=None, allow_none=True)
    email = fields.Email(load_default=None, allow_none=True, validate=validate.Length(max=254))
    owner_id = fields.Integer(load_default=None, allow_none=True)
    latitude = fields.Float(load_default=None, allow_none=True, validate=validate.Range(-90, 90))
    longitude = fields.Float(load_default=None, allow_none=True, validate=validate.Range(-180, 180))


class StoreUpdateSchema(Schema):
    """Payload for updating a store (admin).

    Optional keys are left out of the loaded data when absent so the service
    can tell "not provided" from "cleared".
    """

    class Meta:
        unknown = EXCLUDE

    name = fields.String(load_default=None, allow_none=True)
    address = fields.String(load_default=None, allow_none=True)
    email = fields.Email(load_default=None, allow_none=True, validate=validate.Length(max=254))
    owner_id = fields.Integer(allow_none=True)
    latitude = fields.Float(allow_none=True, validate=validate.Range(-90, 90))
    longitude = fields.Float(allow_none=True, validate=validate.Range(-180, 180))


class StoreSchema(Schema):
    """Representation of a store row."""

    id = fields.Integer(required=True)
    name = fields.String(required=True)
    address = fields.String(required=True)
    email = fields.String(allow_none=True)
    owner_id = fields.Integer(allow_none=True)
    latitude = fields.Float(allow_none=True)
    longitude = fields.Float(allow_none=True)


class StoreAggregateSchema(StoreSchema):
    """A store with its rating aggregate and the requester's own rating."""

    average_rating = fields.Float(required=True)
    total_ratings = fields.Integer(required=True)
    my_rating = fields.Integer(allow_none=True)
