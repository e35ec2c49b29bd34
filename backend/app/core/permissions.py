"""
Role-based authorization rules.

Each rule handles every ``Role`` explicitly; adding a role without
updating these functions raises instead of silently granting access.
"""

from dataclasses import dataclass
from app.models.user import Role


@dataclass(frozen=True)
class Principal:
    """Identity resolved from a verified bearer token"""
    user_id: str
    role: Role


def _unhandled(role: Role):
    return ValueError(f"Unhandled role: {role!r}")


def can_create_products(principal: Principal) -> bool:
    if principal.role is Role.VENDOR:
        return True
    if principal.role in (Role.CLIENT, Role.ADMIN):
        return False
    raise _unhandled(principal.role)


def can_manage_product(principal: Principal, vendor_id: str) -> bool:
    """Owning vendor or an admin may edit and delete a product"""
    if principal.role is Role.ADMIN:
        return True
    if principal.role in (Role.VENDOR, Role.CLIENT):
        return principal.user_id == vendor_id
    raise _unhandled(principal.role)


def can_view_vendor_products(principal: Principal, vendor_id: str) -> bool:
    if principal.role is Role.ADMIN:
        return True
    if principal.role in (Role.VENDOR, Role.CLIENT):
        return principal.user_id == vendor_id
    raise _unhandled(principal.role)
