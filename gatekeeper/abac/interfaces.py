"""Plugin interfaces for the ABAC engine: policies, attribute providers, combiners."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from gatekeeper.models import AccessRequest, Decision


@runtime_checkable
class Policy(Protocol):
    """A self-contained business rule.

    ``applies`` is a cheap synchronous predicate; ``evaluate`` is only awaited
    for requests it returned True for.
    """

    @property
    def name(self) -> str: ...

    @property
    def priority(self) -> int: ...

    def applies(self, request: AccessRequest) -> bool: ...

    async def evaluate(self, request: AccessRequest) -> Decision: ...


@runtime_checkable
class AttributeProvider(Protocol):
    """Lazily supplies extra subject/resource attributes at evaluation time."""

    @property
    def name(self) -> str: ...

    async def load_user_attributes(self, user_id: str) -> dict[str, Any]: ...

    async def load_resource_attributes(
        self, resource_type: str, resource_id: str
    ) -> dict[str, Any]: ...


@runtime_checkable
class PolicyCombiner(Protocol):
    """Reduces per-policy decisions into one final decision."""

    @property
    def name(self) -> str: ...

    def combine(self, decisions: list[Decision]) -> Decision: ...
