"""Dashboard counters."""

from __future__ import annotations

from flask import Blueprint

from storerate.api.deps import (
    json_response,
    rating_service,
    require_any_role,
    timing,
    translate_service_errors,
)
from storerate.models.user import Role
from storerate.schemas import StatsSchema

bp = Blueprint("stats", __name__)

stats_schema = StatsSchema()


@bp.get("/stats")
@require_any_role((Role.ADMIN, Role.STORE_OWNER))
@timing
@translate_service_errors
def stats():
    """Return total users, stores and ratings."""

    return json_response({"data": stats_schema.dump(rating_service().stats())})
