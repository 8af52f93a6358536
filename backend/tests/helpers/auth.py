"""Authentication helpers for tests."""

from __future__ import annotations

from datetime import timedelta

from flask_jwt_extended import create_access_token

from storerate.models.user import User


def issue_token(user: User, expires_delta: timedelta | None = None) -> str:
    """Generate an access token carrying the same claims the auth service issues."""

    role = getattr(user.role, "value", user.role)
    return create_access_token(
        identity=str(user.id),
        additional_claims={"email": user.email, "role": role},
        expires_delta=expires_delta,
    )


def expired_token(user: User) -> str:
    """Return an already expired access token for ``user``."""

    return issue_token(user, expires_delta=timedelta(seconds=-1))
