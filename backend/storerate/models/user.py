"""User model: credentials, profile and role."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from storerate.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .rating import Rating
    from .refresh_token import RefreshToken
    from .store import Store

NAME_MIN_LEN = 5
NAME_MAX_LEN = 60
ADDRESS_MAX_LEN = 400
EMAIL_FORMAT_MESSAGE = "Email format looks invalid."


def is_plausible_email(value: str | None) -> bool:
    """Minimal shape check: one local part, and a dotted domain after the ``@``."""
    v = (value or "").strip()
    local, sep, domain = v.rpartition("@")
    return bool(sep and local and "." in domain.strip("."))


class Role(str, Enum):
    """Roles recognised by the authorization guards."""

    ADMIN = "admin"
    USER = "user"
    STORE_OWNER = "store_owner"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Registered identity.

    Fields
    ------
    name : str
        Display name, 5-60 characters.
    email : str
        Login email. Stored normalized (lowercase, trimmed). Unique.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    address : str | None
        Postal address, at most 400 characters.
    role : Role
        One of ``admin``, ``user`` or ``store_owner``.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(NAME_MAX_LEN), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    address: Mapped[str | None] = mapped_column(String(ADDRESS_MAX_LEN), nullable=True)
    role: Mapped[Role] = mapped_column(
        SAEnum(
            Role,
            name="enum_user_role",
            native_enum=False,
            create_constraint=True,
            length=20,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=Role.USER,
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_role", "role"),
    )

    ratings: Mapped[list[Rating]] = relationship(
        "Rating", back_populates="user", passive_deletes=True
    )
    stores: Mapped[list[Store]] = relationship("Store", back_populates="owner")
    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        "RefreshToken", back_populates="user", passive_deletes=True
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :returns: ``True`` if it matches; otherwise ``False``.
        """
        if not self.password_hash or not raw:
            return False
        return bool(check_password_hash(self.password_hash, raw))

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        if not is_plausible_email(v):
            raise ValueError(EMAIL_FORMAT_MESSAGE)
        return v

    @validates("name")
    def _validate_name(self, key: str, value: str) -> str:
        if not isinstance(value, str):
            raise ValueError("Name is required.")
        v = value.strip()
        if not NAME_MIN_LEN <= len(v) <= NAME_MAX_LEN:
            raise ValueError(f"Name must be {NAME_MIN_LEN}-{NAME_MAX_LEN} characters")
        return v

    @validates("address")
    def _validate_address(self, key: str, value: str | None) -> str | None:
        if value is not None and len(value) > ADDRESS_MAX_LEN:
            raise ValueError(f"Address too long (max {ADDRESS_MAX_LEN} chars)")
        return value

    @validates("role")
    def _coerce_role(self, key: str, value: Role | str) -> Role:
        return value if isinstance(value, Role) else Role(value)
