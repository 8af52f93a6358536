"""Rating submission endpoint."""

from __future__ import annotations

from flask import Blueprint

from storerate.api.deps import (
    json_body,
    json_response,
    rating_service,
    require_auth,
    timing,
    translate_service_errors,
)
from storerate.schemas import RatingAckSchema, RatingSubmitSchema
from storerate.services.ratings.dto import RatingSubmitIn

bp = Blueprint("ratings", __name__)

rating_submit_schema = RatingSubmitSchema()
rating_ack_schema = RatingAckSchema()


@bp.post("")
@require_auth
@timing
@translate_service_errors
def submit_rating():
    """Create or overwrite the caller's rating for a store.

    Invalidates cached store listings and notifies observers once committed.
    """

    data = rating_submit_schema.load(json_body())
    ack = rating_service().submit_rating(
        RatingSubmitIn(
            user_id=data["user_id"],
            store_id=data["store_id"],
            value=data["rating"],
            comment=data.get("comment"),
        )
    )
    message = "Rating submitted successfully" if ack.created else "Rating updated successfully"
    return json_response({"message": message, "data": rating_ack_schema.dump(ack)})
