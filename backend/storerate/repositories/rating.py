"""Rating repository: pair lookup and joined listings."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import select

from storerate.models.rating import Rating
from storerate.models.store import Store
from storerate.models.user import User
from storerate.repositories.base import BaseRepository


class RatingRepository(BaseRepository[Rating]):
    """Persistence-only repository for :class:`Rating`."""

    model = Rating

    def _updatable_fields(self):
        return {"value", "comment", "rated_at"}

    def get_for_pair(self, user_id: int, store_id: int, *, for_update: bool = False) -> Rating | None:
        """Return the rating ``user_id`` gave ``store_id``, if any."""
        stmt = select(Rating).where(Rating.user_id == user_id, Rating.store_id == store_id)
        if for_update:
            stmt = stmt.with_for_update()
        return cast(Rating | None, self.session.execute(stmt).scalars().first())

    def list_by_user(self, user_id: int) -> list[dict[str, Any]]:
        """A user's ratings joined with store name and address, newest first."""
        stmt = (
            select(
                Rating.id,
                Rating.store_id,
                Rating.value,
                Rating.comment,
                Rating.rated_at,
                Store.name.label("store_name"),
                Store.address.label("store_address"),
            )
            .join(Store, Store.id == Rating.store_id)
            .where(Rating.user_id == user_id)
            .order_by(Rating.rated_at.desc(), Rating.id.desc())
        )
        return [dict(row) for row in self.session.execute(stmt).mappings().all()]

    def list_for_owner(self, owner_id: int) -> list[dict[str, Any]]:
        """Ratings on every store owned by ``owner_id``, newest first."""
        stmt = (
            select(
                Rating.id,
                Rating.store_id,
                Rating.user_id,
                Rating.value,
                Rating.comment,
                Rating.rated_at,
                User.name.label("user_name"),
                User.email.label("user_email"),
                Store.name.label("store_name"),
            )
            .join(Store, Store.id == Rating.store_id)
            .join(User, User.id == Rating.user_id)
            .where(Store.owner_id == owner_id)
            .order_by(Rating.rated_at.desc(), Rating.id.desc())
        )
        return [dict(row) for row in self.session.execute(stmt).mappings().all()]
