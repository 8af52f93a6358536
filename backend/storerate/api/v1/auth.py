"""Authentication endpoints: registration, login, token exchange and password updates."""

from __future__ import annotations

from flask import Blueprint

from storerate.api.deps import (
    auth_service,
    identity_service,
    json_body,
    json_response,
    require_auth,
    timing,
    translate_service_errors,
)
from storerate.core.errors import Unauthorized
from storerate.schemas import (
    LoginSchema,
    LogoutSchema,
    PasswordUpdateSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenResponseSchema,
    UserSchema,
)
from storerate.services.auth.dto import AuthResultOut, LoginIn, LogoutIn, RefreshIn
from storerate.services.identity.dto import UserCreateIn, UserPasswordChangeIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
logout_schema = LogoutSchema()
password_schema = PasswordUpdateSchema()
token_schema = TokenResponseSchema()
user_schema = UserSchema()


def _auth_body(result: AuthResultOut) -> dict:
    tokens = token_schema.dump(result.tokens)
    return {"data": {"user": user_schema.dump(result.user), **tokens}}


@bp.post("/register")
@timing
@translate_service_errors
def register():
    """Create an account (user or store owner) and return it with a token pair."""

    payload = register_schema.load(json_body())
    result = auth_service().register(UserCreateIn(**payload))
    return json_response(_auth_body(result))


@bp.post("/login")
@timing
@translate_service_errors
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = login_schema.load(json_body())
    result = auth_service().login(LoginIn(email=data["email"], password=data["password"]))
    return json_response(_auth_body(result))


@bp.post("/refresh-token")
@timing
@translate_service_errors
def refresh_token():
    """Exchange a stored refresh token for a new access token (no rotation)."""

    data = refresh_schema.load(json_body())
    token = data.get("refresh_token")
    if not token:
        raise Unauthorized("Refresh token required")
    access = auth_service().refresh(RefreshIn(refresh_token=token))
    return json_response({"data": token_schema.dump({"access_token": access})})


@bp.post("/logout")
@timing
@translate_service_errors
def logout():
    """Revoke the given refresh token. Always succeeds."""

    data = logout_schema.load(json_body())
    token = data.get("refresh_token")
    if token:
        auth_service().revoke(LogoutIn(refresh_token=token))
    return json_response({"message": "Logged out successfully"})


@bp.post("/auth/update-password")
@require_auth
@timing
@translate_service_errors
def update_password():
    """Change a password after verifying the current one (the user or an admin)."""

    data = password_schema.load(json_body())
    identity_service().change_password(UserPasswordChangeIn(**data))
    return json_response({"message": "Password updated successfully"})
