from __future__ import annotations

from dataclasses import dataclass

from storerate.models.user import Role


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Authenticated caller, decoded from a verified access token.

    :param id: User id (the token subject).
    :param email: Email claim at issuance time.
    :param role: Role claim at issuance time.
    """

    id: int
    email: str
    role: Role
