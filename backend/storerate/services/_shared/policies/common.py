from __future__ import annotations

from collections.abc import Iterable

from storerate.models.user import Role


def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource."""
    return actor_id is not None and str(actor_id) == str(owner_id)


def has_any_role(role: Role | str | None, allowed: Iterable[Role | str]) -> bool:
    """Return True when ``role`` is one of ``allowed``; ``None`` never matches."""
    if role is None:
        return False
    value = role.value if isinstance(role, Role) else str(role)
    return value in {r.value if isinstance(r, Role) else str(r) for r in allowed}


def is_owner_or_admin(*, actor_id, actor_role, owner_id) -> bool:
    """Owner-scoped access: the actor is the target, or an admin."""
    return has_any_role(actor_role, (Role.ADMIN,)) or is_owner(
        actor_id=actor_id, owner_id=owner_id
    )
