"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass

from storerate.models.user import Role, User

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserCreateIn:
    """
    Input DTO for self-registration and admin user creation.

    :param name: Display name (5-60 characters).
    :param email: Login email (normalized to lowercase).
    :param password: Raw password to be hashed by the model.
    :param address: Optional postal address (max 400 characters).
    :param role: Requested role.
    """

    name: str
    email: str
    password: str
    address: str | None = None
    role: Role = Role.USER


@dataclass(frozen=True, slots=True)
class UserPasswordChangeIn:
    """
    Input DTO for password updates.

    :param user_id: Target user.
    :param current_password: Password to verify before the change.
    :param new_password: Replacement password (subject to the complexity rule).
    """

    user_id: int | None
    current_password: str | None
    new_password: str | None


@dataclass(frozen=True, slots=True)
class UserListIn:
    """
    Listing options for ``GET /users``.

    :param search: Case-insensitive substring over name, email, address and role.
    :param sort_by: ``name`` (default), ``email`` or ``role``.
    :param order: ``asc`` (default) or ``desc``.
    """

    search: str | None = None
    sort_by: str = "name"
    order: str = "asc"


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public-safe user representation (never exposes the password hash).
    """

    id: int
    name: str
    email: str
    address: str | None
    role: str

    @classmethod
    def from_model(cls, user: User) -> UserPublicOut:
        role = user.role.value if isinstance(user.role, Role) else str(user.role)
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            address=user.address,
            role=role,
        )
