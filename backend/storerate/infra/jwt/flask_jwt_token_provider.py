# storerate/infra/jwt/flask_jwt_token_provider.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import ExpiredSignatureError, PyJWTError

from storerate.services._shared.errors import TokenExpiredError, TokenInvalidError
from storerate.services._shared.ports import TokenProvider


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for Flask-JWT-Extended.

    .. note::
       Requires an active Flask app context with proper JWT settings.
    """

    def _merge_claims(self, base: dict[str, Any] | None, extra: dict[str, Any]) -> dict[str, Any]:
        """Merge claim dictionaries without mutating inputs."""
        merged = dict(base or {})
        merged.update(extra)
        return merged

    def create_access_token(
        self,
        *,
        identity: str | int,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        from flask_jwt_extended import create_access_token as _create_access

        return cast(
            str,
            _create_access(
                identity=str(identity),
                additional_claims=additional_claims or {},
                expires_delta=expires_delta,
            ),
        )

    def create_refresh_token(
        self,
        *,
        identity: str | int,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
        jti: str,
    ) -> str:
        # The jti is chosen by the caller so the stored row and the token agree.
        from flask_jwt_extended import create_refresh_token as _create_refresh
        from flask_jwt_extended import decode_token as _decode

        claims = self._merge_claims(additional_claims, {"jti": jti})

        token = cast(
            str,
            _create_refresh(
                identity=str(identity),
                additional_claims=claims,
                expires_delta=expires_delta,
            ),
        )

        actual = cast(dict[str, Any], _decode(token))["jti"]
        if actual != jti:
            raise RuntimeError("Refresh token jti mismatch after creation.")

        return token

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify and decode ``token``.

        :raises TokenExpiredError: When the encoded expiry has elapsed.
        :raises TokenInvalidError: On any other verification failure.
        """
        from flask_jwt_extended import decode_token

        try:
            return cast(dict[str, Any], decode_token(token))
        except ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except (PyJWTError, JWTExtendedException) as exc:
            raise TokenInvalidError() from exc
