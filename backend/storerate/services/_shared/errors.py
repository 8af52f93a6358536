"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or HTTP.
They serve as stable contracts between repositories, domain models and
application services.

The translation to HTTP responses (RFC 7807) is handled by
``storerate/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(
    exc: IntegrityError,
    constraint_name: str,
    *,
    columns: Iterable[str] = (),
) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL includes the constraint name in the error message. SQLite only
    names the offending columns (``UNIQUE constraint failed: t.a, t.b``), so
    ``columns`` may be given as a fallback match.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').
    columns : Iterable[str]
        Qualified ``table.column`` names that must all appear in the message.

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    cols = [c.lower() for c in columns]
    return bool(cols) and all(c in message for c in cols)


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to ``APIError`` via ``BaseService``.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """Raised when input violates a domain rule; the message names the rule."""


class AuthenticationError(ServiceError):
    """Raised when credentials are missing or do not match."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class AuthorizationError(ServiceError):
    """Raised when a valid identity lacks the privilege for an action."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return self.detail


class DependencyError(ServiceError):
    """
    Raised by cache, broadcast and mail adapters when their backend fails.

    Never surfaced to clients: callers log it and degrade.
    """


# --------------------------------------------------------------------------- #
# Refresh-token rejections
# --------------------------------------------------------------------------- #


class TokenRejectedError(ServiceError):
    """Base for refresh tokens that cannot be exchanged; clients must sign in again."""

    def __init__(self, message: str = "Invalid or expired token, please re-authenticate") -> None:
        super().__init__(message)


class TokenNotFoundError(TokenRejectedError):
    """No stored row matches the token (never issued, or revoked)."""


class TokenExpiredError(TokenRejectedError):
    """The token's encoded expiry has elapsed."""


class TokenInvalidError(TokenRejectedError):
    """Signature, type or subject checks failed."""
