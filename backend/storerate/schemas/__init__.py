"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginSchema,
    LogoutSchema,
    PasswordUpdateSchema,
    RefreshTokenSchema,
    RegisterSchema,
    TokenResponseSchema,
)
from .rating import (
    OwnerRatingSchema,
    RatingAckSchema,
    RatingSubmitSchema,
    StatsSchema,
    UserRatingSchema,
)
from .store import (
    StoreAggregateSchema,
    StoreCreateSchema,
    StoreQuerySchema,
    StoreSchema,
    StoreUpdateSchema,
)
from .user import UserCreateSchema, UserQuerySchema, UserSchema

__all__ = [
    "LoginSchema",
    "LogoutSchema",
    "PasswordUpdateSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "TokenResponseSchema",
    "OwnerRatingSchema",
    "RatingAckSchema",
    "RatingSubmitSchema",
    "StatsSchema",
    "UserRatingSchema",
    "StoreAggregateSchema",
    "StoreCreateSchema",
    "StoreQuerySchema",
    "StoreSchema",
    "StoreUpdateSchema",
    "UserCreateSchema",
    "UserQuerySchema",
    "UserSchema",
]
