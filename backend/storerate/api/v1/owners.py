"""Store-owner dashboard endpoints."""

from __future__ import annotations

from flask import Blueprint

from storerate.api.deps import (
    json_response,
    rating_service,
    require_auth,
    timing,
    translate_service_errors,
)
from storerate.schemas import OwnerRatingSchema

bp = Blueprint("owners", __name__)

owner_rating_list_schema = OwnerRatingSchema(many=True)


@bp.get("/<int:owner_id>/ratings")
@require_auth
@timing
@translate_service_errors
def list_owner_ratings(owner_id: int):
    """Return every rating on the owner's stores with rater details (owner or admin)."""

    ratings = rating_service().list_owner_ratings(owner_id)
    return json_response({"data": owner_rating_list_schema.dump(ratings)})
