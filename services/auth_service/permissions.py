"""
Role-based capability checks.

Every function here depends on the role alone: no resource ownership, no
clock, no feature flags. Bookings and analytics each come in two tiers, an
"all" tier for ADMIN/MANAGER and a broader own-scope tier that also admits
STYLIST; keep both rather than folding them into one flag.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, Optional, Union

from services.auth_service.models import User, UserRole

RoleLike = Union[UserRole, str, None]

STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.MANAGER, UserRole.STYLIST})
MANAGEMENT_ROLES = frozenset({UserRole.ADMIN, UserRole.MANAGER})


def _role(role_or_user: Union[RoleLike, User]) -> Optional[UserRole]:
    if isinstance(role_or_user, User):
        return role_or_user.role
    return UserRole.parse(role_or_user)


def has_role(role: RoleLike, required: RoleLike) -> bool:
    actual = _role(role)
    return actual is not None and actual == _role(required)


def has_any_role(role: RoleLike, allowed: Iterable[RoleLike]) -> bool:
    actual = _role(role)
    if actual is None:
        return False
    return actual in {_role(r) for r in allowed}


def is_admin(role: RoleLike) -> bool:
    return has_role(role, UserRole.ADMIN)


def is_manager(role: RoleLike) -> bool:
    return has_role(role, UserRole.MANAGER)


def is_admin_or_manager(role: RoleLike) -> bool:
    return has_any_role(role, MANAGEMENT_ROLES)


def is_stylist(role: RoleLike) -> bool:
    return has_role(role, UserRole.STYLIST)


def is_customer(role: RoleLike) -> bool:
    return has_role(role, UserRole.CUSTOMER)


def can_access_dashboard(role: RoleLike) -> bool:
    return has_any_role(role, STAFF_ROLES)


def can_manage_users(role: RoleLike) -> bool:
    return has_any_role(role, MANAGEMENT_ROLES)


def can_manage_stylists(role: RoleLike) -> bool:
    return has_any_role(role, MANAGEMENT_ROLES)


def can_manage_all_bookings(role: RoleLike) -> bool:
    return has_any_role(role, MANAGEMENT_ROLES)


def can_manage_bookings(role: RoleLike) -> bool:
    """Own-scope tier: stylists manage their own bookings"""
    return has_any_role(role, STAFF_ROLES)


def can_manage_services(role: RoleLike) -> bool:
    return has_any_role(role, MANAGEMENT_ROLES)


def can_manage_payments(role: RoleLike) -> bool:
    return has_any_role(role, MANAGEMENT_ROLES)


def can_view_all_analytics(role: RoleLike) -> bool:
    return has_any_role(role, MANAGEMENT_ROLES)


def can_view_analytics(role: RoleLike) -> bool:
    """Own-scope tier: stylists see their own numbers"""
    return has_any_role(role, STAFF_ROLES)


def can_manage_system_settings(role: RoleLike) -> bool:
    return is_admin(role)


def can_view_financial_reports(role: RoleLike) -> bool:
    return has_any_role(role, MANAGEMENT_ROLES)


@dataclass(frozen=True)
class Permissions:
    """All capability flags for one role, computed up front"""
    can_access_dashboard: bool = False
    can_manage_users: bool = False
    can_manage_stylists: bool = False
    can_manage_all_bookings: bool = False
    can_manage_bookings: bool = False
    can_manage_services: bool = False
    can_manage_payments: bool = False
    can_view_all_analytics: bool = False
    can_view_analytics: bool = False
    can_manage_system_settings: bool = False
    can_view_financial_reports: bool = False

    @classmethod
    def for_role(cls, role: Union[RoleLike, User]) -> 'Permissions':
        resolved = _role(role)
        return cls(**{f.name: globals()[f.name](resolved) for f in fields(cls)})

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
