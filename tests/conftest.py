"""Shared test fixtures for Gatekeeper."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from gatekeeper.abac.cache import DecisionCache
from gatekeeper.abac.engine import PolicyEngine
from gatekeeper.authorizer import UnifiedAuthorizer
from gatekeeper.config.models import GatekeeperConfig
from gatekeeper.models import AccessRequest, AuthContext, Resource
from gatekeeper.rbac.registry import RoleRegistry


class FakeClock:
    """Manually advanced clock for TTL and time-window tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_request() -> Callable[..., AccessRequest]:
    def _make(
        user_id: str = "u1",
        role: str = "student",
        action: str = "content:lectures:view",
        resource_type: str = "internship",
        resource_id: str = "",
        user_attrs: dict[str, Any] | None = None,
        resource_attrs: dict[str, Any] | None = None,
    ) -> AccessRequest:
        return AccessRequest(
            subject=AuthContext(
                user_id=user_id,
                email=f"{user_id}@example.com",
                role=role,
                attributes=dict(user_attrs or {}),
            ),
            resource=Resource(
                type=resource_type,
                id=resource_id,
                attributes=dict(resource_attrs or {}),
            ),
            action=action,
        )

    return _make


@pytest.fixture
def registry():
    return RoleRegistry()


@pytest.fixture
def empty_engine(clock):
    """Engine with no policies registered and a controllable cache clock."""
    return PolicyEngine(policies=[], cache=DecisionCache(clock=clock))


@pytest.fixture
def default_engine(clock):
    """Engine with the default built-in policies."""
    return PolicyEngine(cache=DecisionCache(clock=clock))


@pytest.fixture
def authorizer(registry, default_engine):
    return UnifiedAuthorizer(registry, default_engine)


@pytest.fixture
def sample_config():
    return GatekeeperConfig()
