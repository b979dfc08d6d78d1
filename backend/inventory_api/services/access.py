"""Role capabilities and ownership scoping for product operations."""

from __future__ import annotations

from dataclasses import dataclass

from inventory_api.db.models.user import UserRole


@dataclass(frozen=True)
class Identity:
    """The caller resolved from a verified identity token."""

    user_id: str
    email: str
    role: str


def can_bypass_ownership(role: str | UserRole | None) -> bool:
    """Only admins see and mutate products they do not own."""
    if role is None:
        return False
    value = role.value if isinstance(role, UserRole) else str(role)
    return value == UserRole.ADMIN.value


def owner_scope(identity: Identity) -> str | None:
    """Return the owner id to scope by, or ``None`` for unscoped access."""
    if can_bypass_ownership(identity.role):
        return None
    return identity.user_id
