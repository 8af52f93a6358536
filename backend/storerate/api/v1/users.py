"""User endpoints (admin listing and creation, a user's own ratings)."""

from __future__ import annotations

from flask import Blueprint, request

from storerate.api.deps import (
    identity_service,
    json_body,
    json_response,
    rating_service,
    require_auth,
    require_role,
    timing,
    translate_service_errors,
)
from storerate.models.user import Role
from storerate.schemas import UserCreateSchema, UserQuerySchema, UserRatingSchema, UserSchema
from storerate.services.identity.dto import UserCreateIn, UserListIn

bp = Blueprint("users", __name__)

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
user_create_schema = UserCreateSchema()
user_query_schema = UserQuerySchema()
user_rating_list_schema = UserRatingSchema(many=True)


@bp.get("")
@require_role(Role.ADMIN)
@timing
@translate_service_errors
def list_users():
    """Return users filtered by ``search`` and ordered by ``sortBy``/``order``."""

    query = user_query_schema.load(request.args)
    users = identity_service().list_users(UserListIn(**query))
    return json_response({"data": user_list_schema.dump(users)})


@bp.post("")
@require_role(Role.ADMIN)
@timing
@translate_service_errors
def create_user():
    payload = user_create_schema.load(json_body())
    user = identity_service().create_user(UserCreateIn(**payload))
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.get("/<int:user_id>/ratings")
@require_auth
@timing
@translate_service_errors
def list_user_ratings(user_id: int):
    """Return the ratings a user has submitted, newest first."""

    ratings = rating_service().list_user_ratings(user_id)
    return json_response({"data": user_rating_list_schema.dump(ratings)})
