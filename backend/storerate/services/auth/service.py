# storerate/services/auth/service.py
from __future__ import annotations

import uuid
from typing import Any

from storerate.models.refresh_token import RefreshToken
from storerate.models.user import Role, User
from storerate.services._shared.base import BaseService, ServiceContext
from storerate.services._shared.errors import (
    AuthenticationError,
    TokenInvalidError,
    TokenNotFoundError,
    ValidationError,
)
from storerate.services._shared.ports.token_provider import TokenProvider
from storerate.services.auth.dto import (
    AuthResultOut,
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    TokenPairOut,
)
from storerate.services.identity.dto import UserCreateIn, UserPublicOut
from storerate.services.identity.service import stage_user, validate_new_user

REFRESH_TOKEN_TYPE = "refresh"
SELF_REGISTRATION_ROLES = (Role.USER, Role.STORE_OWNER)


class AuthService(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    Access tokens are stateless and cannot be revoked before they expire.
    Refresh tokens are persisted: a token is only handed out after its row has
    committed, and deleting the row revokes it. ``refresh`` still verifies the
    signature and encoded expiry of a token whose row exists.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        token_cfg: AuthTokenConfig | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param token_provider: Adapter for issuing/decoding JWTs.
        :param token_cfg: Access/Refresh expiry configuration.
        """
        super().__init__(ctx=ctx)
        self.tokens = token_provider
        self.cfg = token_cfg or AuthTokenConfig()

    # ------------------------------------------------------------------ #
    # Token issuance
    # ------------------------------------------------------------------ #

    @staticmethod
    def _claims(user: User | UserPublicOut) -> dict[str, Any]:
        role = user.role.value if isinstance(user.role, Role) else str(user.role)
        return {"email": user.email, "role": role}

    def issue_access_token(self, user: User | UserPublicOut) -> str:
        """Mint a signed access token carrying id, email and role. No state is written."""
        return self.tokens.create_access_token(
            identity=user.id,
            additional_claims=self._claims(user),
            expires_delta=self.cfg.access_expires,
        )

    def _stage_refresh_token(self, uow, user: User | UserPublicOut) -> str:
        token = self.tokens.create_refresh_token(
            identity=user.id,
            additional_claims=self._claims(user),
            expires_delta=self.cfg.refresh_expires,
            jti=uuid.uuid4().hex,
        )
        uow.refresh_tokens.add(RefreshToken(user_id=user.id, token=token))
        return token

    def issue_refresh_token(self, user: User | UserPublicOut) -> str:
        """
        Mint a refresh token and persist it.

        The token is returned only after the row commits; if the write fails
        the exception propagates and the token is discarded.
        """
        with self.rw_uow() as uow:
            token = self._stage_refresh_token(uow, user)
        return token

    # ------------------------------------------------------------------ #
    # Register / Login
    # ------------------------------------------------------------------ #

    def register(self, dto: UserCreateIn) -> AuthResultOut:
        """
        Create an account and sign it in.

        The user row and its refresh-token row commit together.

        :raises ValidationError: On account rule violations or a disallowed role.
        :raises ConflictError: When the email is already registered.
        """
        if dto.role not in SELF_REGISTRATION_ROLES:
            raise ValidationError("Role must be user or store_owner")
        validate_new_user(dto)

        with self.rw_uow() as uow:
            user = stage_user(uow.users, dto)
            refresh = self._stage_refresh_token(uow, user)
            out = UserPublicOut.from_model(user)

        access = self.issue_access_token(out)
        self.log.info("auth.registered user_id=%s role=%s", out.id, out.role)
        return AuthResultOut(user=out, tokens=TokenPairOut(access, refresh))

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :raises AuthenticationError: Same error for unknown email and wrong password.
        """
        with self.ro_uow() as uow:
            user = uow.users.authenticate(dto.email, dto.password)
            if user is None:
                raise AuthenticationError("Invalid credentials")
            out = UserPublicOut.from_model(user)

        refresh = self.issue_refresh_token(out)
        access = self.issue_access_token(out)
        self.log.info("auth.login user_id=%s", out.id)
        return AuthResultOut(user=out, tokens=TokenPairOut(access, refresh))

    # ------------------------------------------------------------------ #
    # Refresh (no rotation)
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> str:
        """
        Exchange a refresh token for a new access token.

        :raises TokenNotFoundError: No stored row (never issued or revoked).
        :raises TokenExpiredError: The encoded expiry has elapsed.
        :raises TokenInvalidError: Bad signature, wrong type or subject mismatch,
            or the owning user no longer exists.
        """
        with self.ro_uow() as uow:
            row = uow.refresh_tokens.get_by_token(dto.refresh_token)
            if row is None:
                raise TokenNotFoundError()

            claims = self.tokens.decode(dto.refresh_token)
            if claims.get("type") != REFRESH_TOKEN_TYPE:
                raise TokenInvalidError()
            if str(claims.get("sub")) != str(row.user_id):
                raise TokenInvalidError()

            user = uow.users.get(row.user_id)
            if user is None:
                raise TokenInvalidError()
            out = UserPublicOut.from_model(user)

        return self.issue_access_token(out)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def revoke(self, dto: LogoutIn) -> None:
        """Delete the stored refresh token. Idempotent: unknown tokens are ignored."""
        with self.rw_uow() as uow:
            removed = uow.refresh_tokens.delete_by_token(dto.refresh_token)
        self.log.info("auth.logout revoked=%s", removed)
