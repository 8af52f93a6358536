"""DTOs for StoreService."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def round_rating(value: float | Decimal | None) -> float:
    """Round a mean rating to one decimal place, halves away from zero (4.65 -> 4.7)."""
    if not value:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class StoreQueryIn:
    """
    Listing options for ``GET /stores``.

    :param search: Case-insensitive substring over name, address and email.
    :param sort_by: ``rating`` or ``name`` (anything else means ``name``).
    :param order: ``desc`` or ``asc`` (anything else means ``asc``).
    :param user_id: Whose own rating to project; defaults to the caller.
    """

    search: str | None = None
    sort_by: str | None = None
    order: str | None = None
    user_id: int | None = None


@dataclass(frozen=True, slots=True)
class StoreCreateIn:
    name: str
    address: str
    email: str | None = None
    owner_id: int | None = None
    latitude: float | None = None
    longitude: float | None = None


@dataclass(frozen=True, slots=True)
class StoreUpdateIn:
    """
    Replacement values for an existing store. Coordinates are only changed
    when provided.
    """

    name: str
    address: str
    email: str
    latitude: float | None = None
    longitude: float | None = None
    owner_id: int | None = None
    provided: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class StoreOut:
    id: int
    name: str
    address: str
    email: str | None
    owner_id: int | None
    latitude: float | None
    longitude: float | None


@dataclass(frozen=True, slots=True)
class StoreAggregateOut:
    """
    One row of the store listing.

    :param average_rating: Mean rating rounded to one decimal (``0`` when unrated).
    :param total_ratings: Number of ratings.
    :param my_rating: The requester's own rating, if any.
    """

    id: int
    name: str
    address: str
    email: str | None
    owner_id: int | None
    latitude: float | None
    longitude: float | None
    average_rating: float
    total_ratings: int
    my_rating: int | None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> StoreAggregateOut:
        return cls(
            id=int(row["id"]),
            name=row["name"],
            address=row["address"],
            email=row.get("email"),
            owner_id=row.get("owner_id"),
            latitude=row.get("latitude"),
            longitude=row.get("longitude"),
            average_rating=round_rating(row.get("average_rating")),
            total_ratings=int(row.get("total_ratings") or 0),
            my_rating=int(row["my_rating"]) if row.get("my_rating") is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
