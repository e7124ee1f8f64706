"""Roles, permission catalogue and route policy descriptors for RBAC."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class UserRole(str, Enum):
    """Closed set of roles, listed from most to least privileged."""

    ADMIN = "ADMIN"
    WAREHOUSE_WORKER = "WAREHOUSE_WORKER"
    VIEWER = "VIEWER"


MATERIAL_CREATE = "material.create"
MATERIAL_UPDATE = "material.update"
MATERIAL_DELETE = "material.delete"
STOCK_CREATE = "stock.create"
STOCK_UPDATE = "stock.update"
STOCK_DELETE = "stock.delete"

KNOWN_PERMISSIONS: frozenset[str] = frozenset(
    {
        MATERIAL_CREATE,
        MATERIAL_UPDATE,
        MATERIAL_DELETE,
        STOCK_CREATE,
        STOCK_UPDATE,
        STOCK_DELETE,
    }
)


@dataclass(frozen=True)
class RoutePolicy:
    """
    Requirements attached to a route registration.

    Empty sets mean "not declared": no role restriction, or no permission
    restriction respectively.
    """

    required_roles: frozenset[UserRole] = field(default_factory=frozenset)
    required_permissions: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(
        cls,
        roles: Iterable[UserRole] = (),
        permissions: Iterable[str] = (),
    ) -> "RoutePolicy":
        return cls(frozenset(roles), frozenset(permissions))


def is_authorized(policy: RoutePolicy, role: str, permissions: Iterable[str] = ()) -> bool:
    """
    Allow only if the role is in the required set (when declared) and every
    required permission is held (when declared).
    """
    if policy.required_roles and role not in {r.value for r in policy.required_roles}:
        return False
    if policy.required_permissions and not policy.required_permissions <= set(permissions):
        return False
    return True


def validate_permissions(permissions: Iterable[str]) -> list[str]:
    """Return a sorted, de-duplicated list; raise ValueError on unknown strings."""
    perms = set(permissions)
    unknown = perms - KNOWN_PERMISSIONS
    if unknown:
        raise ValueError(f"Unknown permissions: {', '.join(sorted(unknown))}")
    return sorted(perms)


ADMIN_ONLY = RoutePolicy.of(roles=[UserRole.ADMIN])

# Policies for the inventory routers (materials and stocks).
MATERIAL_CREATE_POLICY = RoutePolicy.of([UserRole.ADMIN], [MATERIAL_CREATE])
MATERIAL_UPDATE_POLICY = RoutePolicy.of([UserRole.ADMIN], [MATERIAL_UPDATE])
MATERIAL_DELETE_POLICY = RoutePolicy.of([UserRole.ADMIN], [MATERIAL_DELETE])
STOCK_CREATE_POLICY = RoutePolicy.of([UserRole.ADMIN, UserRole.WAREHOUSE_WORKER], [STOCK_CREATE])
STOCK_UPDATE_POLICY = RoutePolicy.of([UserRole.ADMIN, UserRole.WAREHOUSE_WORKER], [STOCK_UPDATE])
STOCK_DELETE_POLICY = RoutePolicy.of([UserRole.ADMIN], [STOCK_DELETE])
