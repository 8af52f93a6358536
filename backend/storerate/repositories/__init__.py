"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from storerate.repositories.base import BaseRepository, contains_any, escape_like
from storerate.repositories.rating import RatingRepository
from storerate.repositories.refresh_token import RefreshTokenRepository
from storerate.repositories.store import StoreRepository
from storerate.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "contains_any",
    "escape_like",
    "RatingRepository",
    "RefreshTokenRepository",
    "StoreRepository",
    "UserRepository",
]
