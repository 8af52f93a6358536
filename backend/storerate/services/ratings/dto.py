"""DTOs for RatingService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class RatingSubmitIn:
    """
    A rating submission.

    :param user_id: Author; must be the caller unless the caller is an admin.
    :param store_id: Rated store.
    :param value: Integer 1-5.
    :param comment: Optional text, at most 500 characters.
    """

    user_id: int
    store_id: int
    value: int
    comment: str | None = None


@dataclass(frozen=True, slots=True)
class RatingAckOut:
    """
    Acknowledgement of a submission.

    :param created: ``True`` for a first rating, ``False`` when an existing
        rating was overwritten.
    """

    id: int
    user_id: int
    store_id: int
    value: int
    comment: str | None
    rated_at: datetime
    created: bool


@dataclass(frozen=True, slots=True)
class UserRatingOut:
    id: int
    store_id: int
    store_name: str
    store_address: str
    value: int
    comment: str | None
    rated_at: datetime


@dataclass(frozen=True, slots=True)
class OwnerRatingOut:
    id: int
    store_id: int
    store_name: str
    user_id: int
    user_name: str
    user_email: str
    value: int
    comment: str | None
    rated_at: datetime


@dataclass(frozen=True, slots=True)
class StatsOut:
    total_users: int
    total_stores: int
    total_ratings: int
