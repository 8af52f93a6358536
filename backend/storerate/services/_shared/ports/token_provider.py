from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol


class TokenProvider(Protocol):
    """Port for issuing and decoding signed JWT tokens.

    ``decode`` verifies signature and expiry and raises
    :class:`~storerate.services._shared.errors.TokenExpiredError` or
    :class:`~storerate.services._shared.errors.TokenInvalidError`.
    """

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def create_refresh_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
        jti: str,
    ) -> str: ...

    def decode(self, token: str) -> dict[str, Any]: ...
