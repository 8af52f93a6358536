"""Store endpoints: cached aggregate listing and admin maintenance."""

from __future__ import annotations

from flask import Blueprint, request

from storerate.api.deps import (
    json_body,
    json_response,
    require_auth,
    require_role,
    store_service,
    timing,
    translate_service_errors,
)
from storerate.models.user import Role
from storerate.schemas import (
    StoreAggregateSchema,
    StoreCreateSchema,
    StoreQuerySchema,
    StoreSchema,
    StoreUpdateSchema,
)
from storerate.services.stores.dto import StoreCreateIn, StoreQueryIn, StoreUpdateIn

bp = Blueprint("stores", __name__)

store_query_schema = StoreQuerySchema()
store_create_schema = StoreCreateSchema()
store_update_schema = StoreUpdateSchema()
store_schema = StoreSchema()
store_list_schema = StoreAggregateSchema(many=True)

_OPTIONAL_UPDATE_FIELDS = ("owner_id", "latitude", "longitude")


@bp.get("")
@require_auth
@timing
@translate_service_errors
def list_stores():
    """Return per-store rating aggregates, served from the cache when possible."""

    query = store_query_schema.load(request.args)
    items = store_service().list_stores(StoreQueryIn(**query))
    return json_response({"data": store_list_schema.dump(items)})


@bp.post("")
@require_role(Role.ADMIN)
@timing
@translate_service_errors
def create_store():
    payload = store_create_schema.load(json_body())
    store = store_service().create_store(StoreCreateIn(**payload))
    return json_response({"data": store_schema.dump(store)}, status=201)


@bp.put("/<int:store_id>")
@require_role(Role.ADMIN)
@timing
@translate_service_errors
def update_store(store_id: int):
    payload = store_update_schema.load(json_body())
    provided = frozenset(key for key in _OPTIONAL_UPDATE_FIELDS if key in payload)
    store = store_service().update_store(store_id, StoreUpdateIn(provided=provided, **payload))
    return json_response({"data": store_schema.dump(store)})
