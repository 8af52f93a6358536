# storerate/services/_shared/base.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from storerate.core import errors as api_errors
from storerate.models.user import Role
from storerate.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    TokenRejectedError,
)
from storerate.services._shared.policies.common import has_any_role, is_owner_or_admin
from storerate.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated user identifier.
    :param actor_role: Role claim of the authenticated user.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    actor_role: Role | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Offer shared authorization helpers over :class:`ServiceContext`.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Side effects outside the database run only after the UoW commits.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()
        self.log = logging.getLogger(type(self).__module__)

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # -------------------------- Error handling ------------------------------

    @staticmethod
    def translate_exceptions(exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :returns: Translated exception ready to be re-raised.
        """
        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            # Public contract reports duplicates as 400 with code "conflict"
            return api_errors.Conflict(str(exc))

        if isinstance(exc, AuthenticationError):
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, (AuthorizationError, TokenRejectedError)):
            return api_errors.Forbidden(str(exc))

        # ValidationError and any other ServiceError → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.BadRequest(str(exc))

        return exc

    # --------------------------- AuthZ --------------------------------

    def ensure_role(self, *roles: Role) -> None:
        """
        Ensure the context actor holds one of ``roles``.

        :raises AuthorizationError: When there is no actor or the role differs.
        """
        if self.ctx.actor_id is None or not has_any_role(self.ctx.actor_role, roles):
            raise AuthorizationError()

    def ensure_owner_or_admin(self, owner_id: int, *, msg: str | None = None) -> None:
        """
        Ensure the context actor is ``owner_id`` or an admin.

        :raises AuthorizationError: If neither holds.
        """
        if not is_owner_or_admin(
            actor_id=self.ctx.actor_id, actor_role=self.ctx.actor_role, owner_id=owner_id
        ):
            raise AuthorizationError(msg or "Access denied")
