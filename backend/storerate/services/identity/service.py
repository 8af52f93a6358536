"""
IdentityService
===============

Aggregate service responsible for the `User` aggregate:
- Account creation (self-registration and admin-created accounts)
- Password lifecycle
- Listing for administrators
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from storerate.models.user import (
    ADDRESS_MAX_LEN,
    EMAIL_FORMAT_MESSAGE,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    Role,
    User,
    is_plausible_email,
)
from storerate.repositories.user import UserRepository
from storerate.services._shared.base import BaseService
from storerate.services._shared.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    violates,
)
from storerate.services._shared.policies.passwords import PASSWORD_RULE_MESSAGE, is_valid_password
from storerate.services.identity.dto import (
    UserCreateIn,
    UserListIn,
    UserPasswordChangeIn,
    UserPublicOut,
)

DUPLICATE_EMAIL_MESSAGE = "Email already exists"
USER_SORT_FIELDS = ("name", "email", "role")


def validate_new_user(dto: UserCreateIn) -> None:
    """
    Check the account rules shared by every creation path.

    :raises ValidationError: Naming the first violated rule.
    """
    name = (dto.name or "").strip()
    if not NAME_MIN_LEN <= len(name) <= NAME_MAX_LEN:
        raise ValidationError(f"Name must be {NAME_MIN_LEN}-{NAME_MAX_LEN} characters")
    if not is_plausible_email(dto.email):
        raise ValidationError(EMAIL_FORMAT_MESSAGE)
    if dto.address and len(dto.address) > ADDRESS_MAX_LEN:
        raise ValidationError(f"Address too long (max {ADDRESS_MAX_LEN} chars)")
    if not is_valid_password(dto.password):
        raise ValidationError(PASSWORD_RULE_MESSAGE)


def stage_user(repo: UserRepository, dto: UserCreateIn) -> User:
    """
    Add a new user to the current unit of work and flush it.

    Shared by :class:`IdentityService` and the registration flow, which must
    create the refresh-token row in the same transaction.

    :raises ConflictError: When the email is already registered.
    :raises ValidationError: When a model validator rejects a field.
    """
    if repo.exists_by_email(dto.email):
        raise ConflictError("User", DUPLICATE_EMAIL_MESSAGE)
    try:
        # Savepoint so a lost race leaves the outer transaction usable.
        with repo.session.begin_nested():
            user = User(
                name=dto.name,
                email=dto.email,
                password=dto.password,
                address=dto.address,
                role=dto.role,
            )
            repo.add(user)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    except IntegrityError as exc:
        if violates(exc, "uq_users_email", columns=("users.email",)):
            raise ConflictError("User", DUPLICATE_EMAIL_MESSAGE) from exc
        raise
    return user


class IdentityService(BaseService):
    """
    Application service for the `User` aggregate.

    Responsibilities
    ----------------
    - Create users ensuring email uniqueness.
    - Manage password lifecycle.
    - List users for administrators.
    """

    # --------------------------------------------------------------------- #
    # Creation
    # --------------------------------------------------------------------- #

    def create_user(self, dto: UserCreateIn) -> UserPublicOut:
        """
        Create an account without issuing tokens (admin flow).

        :raises AuthorizationError: If the context actor is not an admin.
        :raises ValidationError: On name/address/password rule violations.
        :raises ConflictError: When the email is already registered.
        """
        self.ensure_role(Role.ADMIN)
        validate_new_user(dto)

        with self.rw_uow() as uow:
            user = stage_user(uow.users, dto)
            out = UserPublicOut.from_model(user)

        self.log.info("user.created id=%s role=%s by=%s", out.id, out.role, self.ctx.actor_id)
        return out

    # --------------------------------------------------------------------- #
    # Listing
    # --------------------------------------------------------------------- #

    def list_users(self, dto: UserListIn) -> list[UserPublicOut]:
        """
        List users for administrators.

        Unknown ``sort_by`` values fall back to ``name``; ``order`` other than
        ``desc`` means ascending.

        :raises AuthorizationError: If the context actor is not an admin.
        """
        self.ensure_role(Role.ADMIN)
        sort_by = dto.sort_by if dto.sort_by in USER_SORT_FIELDS else "name"
        descending = (dto.order or "").lower() == "desc"

        with self.ro_uow() as uow:
            users = uow.users.search(search=dto.search, sort_by=sort_by, descending=descending)
            return [UserPublicOut.from_model(u) for u in users]

    # --------------------------------------------------------------------- #
    # Password management
    # --------------------------------------------------------------------- #

    def change_password(self, dto: UserPasswordChangeIn) -> None:
        """
        Change a user's password after verifying the current one.

        Checks run in this order: required fields, user exists, caller is the
        user or an admin, current password matches, new password complexity.

        :raises ValidationError: Missing fields, wrong current password or weak new password.
        :raises NotFoundError: When user not found.
        :raises AuthorizationError: When the caller may not change this password.
        """
        if not dto.user_id or not dto.current_password or not dto.new_password:
            raise ValidationError("Missing required fields")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)

            self.ensure_owner_or_admin(user.id)

            if not user.verify_password(dto.current_password):
                raise ValidationError("Incorrect current password")

            if not is_valid_password(dto.new_password):
                raise ValidationError(f"New {PASSWORD_RULE_MESSAGE}")

            repo.update_password(user, dto.new_password)

        self.log.info("user.password_changed id=%s", dto.user_id)
