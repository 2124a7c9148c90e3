"""In-memory attribute provider."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class StaticAttributeProvider:
    """Serves attributes from dictionaries held in memory.

    ``users`` maps user id to attributes; ``resources`` maps
    ``(resource_type, resource_id)`` to attributes. Lookups for unknown keys
    return an empty dict. Returned dicts are copies.
    """

    def __init__(
        self,
        name: str = "static",
        users: Mapping[str, Mapping[str, Any]] | None = None,
        resources: Mapping[tuple[str, str], Mapping[str, Any]] | None = None,
    ) -> None:
        self._name = name
        self._users: dict[str, dict[str, Any]] = {k: dict(v) for k, v in (users or {}).items()}
        self._resources: dict[tuple[str, str], dict[str, Any]] = {
            k: dict(v) for k, v in (resources or {}).items()
        }

    @property
    def name(self) -> str:
        return self._name

    def set_user_attributes(self, user_id: str, **attributes: Any) -> None:
        self._users.setdefault(user_id, {}).update(attributes)

    def set_resource_attributes(
        self, resource_type: str, resource_id: str, **attributes: Any
    ) -> None:
        self._resources.setdefault((resource_type, resource_id), {}).update(attributes)

    async def load_user_attributes(self, user_id: str) -> dict[str, Any]:
        return dict(self._users.get(user_id, {}))

    async def load_resource_attributes(
        self, resource_type: str, resource_id: str
    ) -> dict[str, Any]:
        return dict(self._resources.get((resource_type, resource_id), {}))
