"""Role-based access control."""

from gatekeeper.rbac.registry import (
    DEFAULT_ROLE_PERMISSIONS,
    ROLE_HIERARCHY,
    RoleRegistry,
    is_higher_role,
    validate_role,
)

__all__ = [
    "DEFAULT_ROLE_PERMISSIONS",
    "ROLE_HIERARCHY",
    "RoleRegistry",
    "is_higher_role",
    "validate_role",
]
