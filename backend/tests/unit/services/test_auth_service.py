# tests/unit/services/test_auth_service.py
from __future__ import annotations

from datetime import timedelta

import pytest
from freezegun import freeze_time
from sqlalchemy import func, select

from storerate.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from storerate.models.refresh_token import RefreshToken
from storerate.models.user import Role, User
from storerate.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    TokenExpiredError,
    TokenInvalidError,
    TokenNotFoundError,
    ValidationError,
)
from storerate.services.auth.dto import AuthTokenConfig, LoginIn, LogoutIn, RefreshIn
from storerate.services.auth.service import AuthService
from storerate.services.identity.dto import UserCreateIn
from tests.factories.user import UserFactory
from tests.helpers.utils import not_raises


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def service(app) -> AuthService:
    """AuthService wired to the real JWT adapter with the default lifetimes."""
    return AuthService(
        token_provider=JWTTokenProvider(),
        token_cfg=AuthTokenConfig(
            access_expires=timedelta(minutes=15), refresh_expires=timedelta(days=7)
        ),
    )


def _stored_tokens(session, user_id: int) -> int:
    stmt = select(func.count(RefreshToken.id)).where(RefreshToken.user_id == user_id)
    return session.execute(stmt).scalar_one()


def _register(service, **overrides):
    data = {
        "name": "Jordan Smith Two",
        "email": "jordan@example.com",
        "password": "Secret@123",
        "address": "1 Main Street",
    }
    data.update(overrides)
    return service.register(UserCreateIn(**data))


# -------------------------------- Tests ----------------------------------- #
def test_register_creates_user_and_refresh_row(service, session):
    result = _register(service, email="Jordan@Example.com")

    assert result.user.email == "jordan@example.com"
    assert result.user.role == "user"
    assert session.get(User, result.user.id) is not None
    assert _stored_tokens(session, result.user.id) == 1

    claims = service.tokens.decode(result.tokens.access_token)
    assert claims["sub"] == str(result.user.id)
    assert claims["email"] == "jordan@example.com"
    assert claims["role"] == "user"


def test_register_as_store_owner_is_allowed(service):
    result = _register(service, role=Role.STORE_OWNER)

    assert result.user.role == "store_owner"


def test_register_as_admin_is_refused(service):
    with pytest.raises(ValidationError, match="Role must be user or store_owner"):
        _register(service, role=Role.ADMIN)


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"name": "Abcd"}, "Name must be 5-60 characters"),
        ({"address": "x" * 401}, "Address too long"),
        ({"password": "weakpass"}, "Password: 8-16 chars"),
    ],
)
def test_register_rule_violations(service, session, overrides, message):
    with pytest.raises(ValidationError, match=message):
        _register(service, **overrides)

    assert session.execute(select(func.count(User.id))).scalar_one() == 0


def test_register_duplicate_email_conflicts(service, session):
    UserFactory(email="jordan@example.com")
    session.commit()

    with pytest.raises(ConflictError):
        _register(service, email="JORDAN@example.com")


def test_login_issues_pair_and_persists_refresh(service, session):
    user = UserFactory(email="a@example.com", password="Secret@123")
    session.commit()

    result = service.login(LoginIn(email="a@example.com", password="Secret@123"))

    assert result.user.id == user.id
    assert result.tokens.access_token != result.tokens.refresh_token
    assert _stored_tokens(session, user.id) == 1


@pytest.mark.parametrize(
    ("email", "password"),
    [("a@example.com", "Wrong@123"), ("nobody@example.com", "Secret@123")],
)
def test_login_failures_share_one_error(service, session, email, password):
    UserFactory(email="a@example.com", password="Secret@123")
    session.commit()

    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        service.login(LoginIn(email=email, password=password))


def test_refresh_returns_access_token_without_rotation(service, session):
    result = _register(service)

    access = service.refresh(RefreshIn(result.tokens.refresh_token))
    again = service.refresh(RefreshIn(result.tokens.refresh_token))

    assert service.tokens.decode(access)["type"] == "access"
    assert service.tokens.decode(again)["sub"] == str(result.user.id)
    assert _stored_tokens(session, result.user.id) == 1


def test_revoked_token_is_not_found(service, session):
    result = _register(service)

    service.revoke(LogoutIn(result.tokens.refresh_token))

    assert _stored_tokens(session, result.user.id) == 0
    with pytest.raises(TokenNotFoundError):
        service.refresh(RefreshIn(result.tokens.refresh_token))


def test_revoke_is_idempotent(service):
    with not_raises(Exception):
        service.revoke(LogoutIn("never-issued"))
        service.revoke(LogoutIn("never-issued"))


def test_expired_refresh_token_is_rejected_even_if_stored(service):
    with freeze_time("2024-03-01 09:00:00"):
        result = _register(service)

    with freeze_time("2024-03-09 09:00:00"), pytest.raises(TokenExpiredError):
        service.refresh(RefreshIn(result.tokens.refresh_token))


def test_access_token_cannot_be_used_as_refresh(service):
    result = _register(service)

    with pytest.raises(TokenNotFoundError):
        service.refresh(RefreshIn(result.tokens.access_token))


def test_stored_access_token_fails_type_check(service, session):
    result = _register(service)
    session.add(RefreshToken(user_id=result.user.id, token=result.tokens.access_token))
    session.commit()

    with pytest.raises(TokenInvalidError):
        service.refresh(RefreshIn(result.tokens.access_token))


def test_subject_mismatch_is_invalid(service, session):
    victim = _register(service)
    other = UserFactory()
    session.commit()
    forged = service.tokens.create_refresh_token(identity=other.id, jti="forged-jti")
    session.add(RefreshToken(user_id=victim.user.id, token=forged))
    session.commit()

    with pytest.raises(TokenInvalidError):
        service.refresh(RefreshIn(forged))
