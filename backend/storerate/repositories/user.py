"""User repository for persistence and authentication utilities."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import Select, String, cast as sa_cast, select

from storerate.models.user import User
from storerate.repositories.base import BaseRepository, _apply_sorting, contains_any


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Handles lookup, listing and password assignment. It never issues tokens.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        return {
            "name": User.name,
            "email": User.email,
            "role": User.role,
            "created_at": User.created_at,
        }

    def _updatable_fields(self):
        """Publicly allowed updatable fields (not including password)."""
        return {"name", "address"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive)."""
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def search(
        self,
        *,
        search: str | None = None,
        sort_by: str = "name",
        descending: bool = False,
    ) -> list[User]:
        """List users matching ``search`` over name, email, address and role.

        :param search: Case-insensitive substring; blank lists everyone.
        :param sort_by: One of ``name``, ``email`` or ``role``.
        :param descending: Reverse the primary order.
        """
        stmt: Select[Any] = select(User)
        clause = contains_any((User.name, User.email, User.address, sa_cast(User.role, String)), search)
        if clause is not None:
            stmt = stmt.where(clause)
        token = f"-{sort_by}" if descending else sort_by
        stmt = _apply_sorting(stmt, self._sortable_fields(), [token], pk_attr=User.id)
        return list(self.session.execute(stmt).scalars().all())

    # ---------------------------- Password ops ----------------------------

    def update_password(self, user: User, new_password: str) -> None:
        """Assign a new raw password (the model hashes it) and flush."""
        user.password = new_password
        self.flush()

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user when ``email`` and ``password`` match, else ``None``."""
        user = self.get_by_email(email)
        if not user or not user.verify_password(password):
            return None
        return user
