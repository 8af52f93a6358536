"""Store model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Float, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from storerate.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .rating import Rating
    from .user import User


class Store(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A rateable store.

    Fields
    ------
    name : str
        Display name, searched case-insensitively.
    address : str
        Street address, at most 400 characters.
    email : str | None
        Contact email; used for notifications when the store has no owner.
    owner_id : int | None
        Weak reference to the owning :class:`User`. Stores without an owner
        are excluded from owner-scoped views.
    latitude, longitude : float | None
        Optional coordinates supplied by an external geocoder.
    """

    __tablename__ = "stores"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(400), nullable=False)
    email: Mapped[str | None] = mapped_column(String(254), nullable=True)
    owner_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    __table_args__ = (
        Index("ix_stores_owner_id", "owner_id"),
        Index("ix_stores_name", "name"),
    )

    owner: Mapped[User | None] = relationship("User", back_populates="stores")
    ratings: Mapped[list[Rating]] = relationship(
        "Rating", back_populates="store", passive_deletes=True
    )

    @validates("name", "address")
    def _strip_required(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key.capitalize()} is required.")
        return value.strip()

    @validates("email")
    def _normalize_email(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        v = value.strip().lower()
        return v or None
