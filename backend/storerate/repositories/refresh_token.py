"""Refresh-token repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import delete, select

from storerate.models.refresh_token import RefreshToken
from storerate.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`."""

    model = RefreshToken

    def get_by_token(self, token: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def delete_by_token(self, token: str) -> int:
        """Delete the row holding ``token``; returns the number of rows removed."""
        result = self.session.execute(delete(RefreshToken).where(RefreshToken.token == token))
        return int(result.rowcount or 0)
