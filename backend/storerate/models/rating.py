"""Rating model: one row per (user, store) pair."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storerate.core.extensions import db

from .base import PKMixin, ReprMixin, utcnow

if TYPE_CHECKING:
    from .store import Store
    from .user import User

RATING_MIN = 1
RATING_MAX = 5
COMMENT_MAX_LEN = 500

# Constraint name inspected by the upsert path to detect a concurrent insert.
UQ_RATINGS_USER_STORE = "uq_ratings_user_id_store_id"


class Rating(PKMixin, ReprMixin, db.Model):
    """
    A user's rating of a store.

    Resubmission overwrites ``value``, ``comment`` and ``rated_at`` in place;
    the unique constraint on ``(user_id, store_id)`` is the final guard
    against duplicates under concurrent submissions.
    """

    __tablename__ = "ratings"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    store_id: Mapped[int] = mapped_column(
        ForeignKey("stores.id", ondelete="CASCADE"), nullable=False
    )
    value: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(String(COMMENT_MAX_LEN), nullable=True)
    rated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        UniqueConstraint("user_id", "store_id", name=UQ_RATINGS_USER_STORE),
        CheckConstraint(
            f"value >= {RATING_MIN} AND value <= {RATING_MAX}", name="value_range"
        ),
        Index("ix_ratings_store_id", "store_id"),
    )

    user: Mapped[User] = relationship("User", back_populates="ratings")
    store: Mapped[Store] = relationship("Store", back_populates="ratings")
