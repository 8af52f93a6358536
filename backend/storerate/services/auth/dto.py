# storerate/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from storerate.services.identity.dto import UserPublicOut

DEFAULT_ACCESS_EXPIRES = timedelta(minutes=15)
DEFAULT_REFRESH_EXPIRES = timedelta(days=7)

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email (normalized).
    :param password: Raw password (to be verified).
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param refresh_token: Encoded refresh JWT to revoke.
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Result of a successful registration or login.

    :param user: Public user summary.
    :param tokens: Freshly issued token pair.
    """

    user: UserPublicOut
    tokens: TokenPairOut


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :param refresh_expires: Refresh token lifetime.
    """

    access_expires: timedelta = DEFAULT_ACCESS_EXPIRES
    refresh_expires: timedelta = DEFAULT_REFRESH_EXPIRES

    @classmethod
    def from_mapping(cls, config) -> AuthTokenConfig:
        """Build from a Flask config mapping (``JWT_*_TOKEN_EXPIRES`` keys)."""
        return cls(
            access_expires=config.get("JWT_ACCESS_TOKEN_EXPIRES", DEFAULT_ACCESS_EXPIRES),
            refresh_expires=config.get("JWT_REFRESH_TOKEN_EXPIRES", DEFAULT_REFRESH_EXPIRES),
        )
