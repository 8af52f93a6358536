"""Store repository, including the per-store rating aggregation query."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, func, literal, select
from sqlalchemy.orm import aliased

from storerate.models.rating import Rating
from storerate.models.store import Store
from storerate.repositories.base import BaseRepository, _apply_sorting, contains_any

SORT_BY_NAME = "name"
SORT_BY_RATING = "rating"


class StoreRepository(BaseRepository[Store]):
    """Persistence-only repository for :class:`Store`."""

    model = Store

    def _updatable_fields(self):
        return {"name", "address", "email", "owner_id", "latitude", "longitude"}

    def aggregate(
        self,
        *,
        search: str | None = None,
        sort_by: str = SORT_BY_NAME,
        descending: bool = False,
        requester_id: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return one aggregate row per store passing ``search``.

        Each row carries the store columns plus ``average_rating`` (full
        precision, ``0`` with no ratings), ``total_ratings`` and
        ``my_rating`` (the requester's own value or ``None``).

        :param search: Case-insensitive substring matched against name,
            address and email.
        :param sort_by: ``"rating"`` orders by the mean; anything else by name.
        :param descending: Reverse the primary order.
        :param requester_id: User whose own rating is projected.
        """
        average = func.coalesce(func.avg(Rating.value), 0)
        total = func.count(Rating.id)

        if requester_id is not None:
            mine = aliased(Rating)
            my_rating: Any = (
                select(mine.value)
                .where(mine.store_id == Store.id, mine.user_id == requester_id)
                .correlate(Store)
                .scalar_subquery()
            )
        else:
            my_rating = literal(None)

        stmt: Select[Any] = (
            select(
                Store.id,
                Store.name,
                Store.address,
                Store.email,
                Store.owner_id,
                Store.latitude,
                Store.longitude,
                average.label("average_rating"),
                total.label("total_ratings"),
                my_rating.label("my_rating"),
            )
            .outerjoin(Rating, Rating.store_id == Store.id)
            .group_by(Store.id)
        )

        clause = contains_any((Store.name, Store.address, Store.email), search)
        if clause is not None:
            stmt = stmt.where(clause)

        field = SORT_BY_RATING if sort_by == SORT_BY_RATING else SORT_BY_NAME
        token = f"-{field}" if descending else field
        stmt = _apply_sorting(
            stmt,
            {SORT_BY_NAME: Store.name, SORT_BY_RATING: average},
            [token],
            pk_attr=Store.id,
        )

        rows = self.session.execute(stmt).mappings().all()
        return [
            {
                **row,
                "average_rating": float(row["average_rating"] or 0),
                "total_ratings": int(row["total_ratings"] or 0),
            }
            for row in rows
        ]
