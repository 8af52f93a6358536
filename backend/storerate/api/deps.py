"""Shared API helpers: authentication guards, service wiring and response helpers."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException, NoAuthorizationError
from jwt import PyJWTError

from storerate.core.errors import Forbidden, Unauthorized
from storerate.core.extensions import get_aggregate_cache, get_mailer, get_rating_broadcaster
from storerate.core.logger import ensure_request_id
from storerate.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from storerate.models.user import Role
from storerate.services._shared.base import BaseService, ServiceContext
from storerate.services._shared.dto import Identity
from storerate.services._shared.errors import ServiceError
from storerate.services.auth.dto import AuthTokenConfig
from storerate.services.auth.service import AuthService
from storerate.services.identity.service import IdentityService
from storerate.services.ratings.service import RatingService
from storerate.services.stores.service import StoreService

F = TypeVar("F", bound=Callable[..., Any])

NO_TOKEN_MESSAGE = "Access denied, no token provided"
REAUTHENTICATE_MESSAGE = "Invalid or expired token, please re-authenticate"
ACCESS_DENIED_MESSAGE = "Access denied"


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


def authenticate() -> Identity:
    """Verify the bearer access token and return the caller identity.

    A request without a token gets 401 so the client knows to log in. A token
    that fails signature, expiry or type checks gets 403 with a hint that a
    refresh-token exchange (or a new login) is needed.
    """

    try:
        verify_jwt_in_request(optional=False)
        claims = get_jwt() or {}
        return Identity(
            id=int(claims["sub"]),
            email=str(claims.get("email", "")),
            role=Role(claims.get("role")),
        )
    except NoAuthorizationError as exc:
        raise Unauthorized(NO_TOKEN_MESSAGE) from exc
    except (JWTExtendedException, PyJWTError, KeyError, TypeError, ValueError) as exc:
        raise Forbidden(REAUTHENTICATE_MESSAGE) from exc


def current_identity() -> Identity | None:
    return getattr(g, "identity", None)


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token; stores it on ``g.identity``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.identity = authenticate()
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_any_role(roles: Iterable[Role]) -> Callable[[F], F]:
    """Authenticate, then deny unless the caller holds one of ``roles``.

    Denials never say which check failed.
    """

    allowed = frozenset(roles)

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            identity = authenticate()
            if identity.role not in allowed:
                raise Forbidden(ACCESS_DENIED_MESSAGE)
            g.identity = identity
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def require_role(role: Role) -> Callable[[F], F]:
    return require_any_role((role,))


def translate_service_errors(func: F) -> F:
    """Re-raise service-layer errors as their HTTP counterparts."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return func(*args, **kwargs)
        except ServiceError as exc:
            raise BaseService.translate_exceptions(exc) from exc

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Service wiring
# --------------------------------------------------------------------------- #


def service_context() -> ServiceContext:
    identity = current_identity()
    return ServiceContext(
        actor_id=identity.id if identity else None,
        actor_role=identity.role if identity else None,
        request_id=ensure_request_id(),
    )


def auth_service() -> AuthService:
    return AuthService(
        token_provider=JWTTokenProvider(),
        token_cfg=AuthTokenConfig.from_mapping(current_app.config),
        ctx=service_context(),
    )


def identity_service() -> IdentityService:
    return IdentityService(ctx=service_context())


def store_service() -> StoreService:
    return StoreService(
        cache=get_aggregate_cache(),
        ttl_seconds=int(current_app.config.get("STORES_CACHE_TTL_SECONDS", 60)),
        namespace=current_app.config.get("STORES_CACHE_NAMESPACE", "stores"),
        ctx=service_context(),
    )


def rating_service() -> RatingService:
    return RatingService(
        cache=get_aggregate_cache(),
        broadcaster=get_rating_broadcaster(),
        mailer=get_mailer(),
        namespace=current_app.config.get("STORES_CACHE_NAMESPACE", "stores"),
        ctx=service_context(),
    )


# --------------------------------------------------------------------------- #
# Request / response helpers
# --------------------------------------------------------------------------- #


def json_body() -> dict[str, Any]:
    """Return the JSON object body, or an empty mapping for missing/invalid bodies."""

    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
