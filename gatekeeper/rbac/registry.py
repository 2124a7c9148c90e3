"""Static role to permission lookup (RBAC)."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping

from gatekeeper.models import Permission, Role, as_str

logger = logging.getLogger(__name__)


_INTERNSHIP_MANAGEMENT = [
    Permission.create_internship,
    Permission.update_internship,
    Permission.delete_internship,
    Permission.view_internship,
    Permission.publish_internship,
]

_CONTENT_ACCESS = [
    Permission.view_lectures,
    Permission.view_assignments,
    Permission.view_resources,
    Permission.download_content,
]

DEFAULT_ROLE_PERMISSIONS: dict[str, list[str]] = {
    Role.admin.value: [
        p.value
        for p in [
            *_INTERNSHIP_MANAGEMENT,
            *_CONTENT_ACCESS,
            Permission.manage_users,
            Permission.view_all_users,
            Permission.system_config,
            Permission.view_analytics,
        ]
    ],
    # Ownership of internships is narrowed further by ABAC
    Role.instructor.value: [
        p.value for p in [*_INTERNSHIP_MANAGEMENT, *_CONTENT_ACCESS, Permission.view_analytics]
    ],
    # Content access is narrowed to enrolled internships by ABAC
    Role.student.value: [p.value for p in [Permission.view_internship, *_CONTENT_ACCESS]],
}

ROLE_HIERARCHY: dict[str, int] = {
    Role.admin.value: 3,
    Role.instructor.value: 2,
    Role.student.value: 1,
}


def validate_role(role: str | Role) -> bool:
    """True if ``role`` is one of the known roles."""
    return as_str(role) in ROLE_HIERARCHY


def is_higher_role(role: str | Role, other: str | Role) -> bool:
    """True if ``role`` ranks strictly above ``other``. Unknown roles rank lowest."""
    return ROLE_HIERARCHY.get(as_str(role), 0) > ROLE_HIERARCHY.get(as_str(other), 0)


class RoleRegistry:
    """Immutable role to permission table with a precomputed membership index.

    The mapping is copied at construction and every ``(role, permission)``
    pair is materialised into a set, so ``has_permission`` is a single hash
    lookup. Nothing mutates the registry afterwards; the lock only guards
    reads against a half-built instance.
    """

    def __init__(self, role_permissions: Mapping[str, Iterable[str]] | None = None) -> None:
        source = DEFAULT_ROLE_PERMISSIONS if role_permissions is None else role_permissions
        self._lock = threading.RLock()
        self._role_permissions: dict[str, list[str]] = {
            as_str(role): [as_str(p) for p in perms] for role, perms in source.items()
        }
        self._index: frozenset[tuple[str, str]] = frozenset()
        self._build_index()

    def _build_index(self) -> None:
        with self._lock:
            self._index = frozenset(
                (role, perm)
                for role, perms in self._role_permissions.items()
                for perm in perms
            )
        logger.info(
            "RBAC permission index built total_entries=%d roles_count=%d",
            len(self._index),
            len(self._role_permissions),
        )

    def has_permission(self, role: str | Role, permission: str | Permission) -> bool:
        """O(1) check. Unknown roles or permissions are simply not granted."""
        with self._lock:
            return (as_str(role), as_str(permission)) in self._index

    def get_user_permissions(self, role: str | Role) -> list[str]:
        with self._lock:
            return list(self._role_permissions.get(as_str(role), []))

    def get_all_roles(self) -> list[str]:
        with self._lock:
            return list(self._role_permissions)

    def get_role_permissions(self) -> dict[str, list[str]]:
        """Deep copy of the full mapping."""
        with self._lock:
            return {role: list(perms) for role, perms in self._role_permissions.items()}
