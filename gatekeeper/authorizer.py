"""Single entry point combining RBAC and ABAC."""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Any

from gatekeeper.abac.cache import DecisionCache
from gatekeeper.abac.combiners import create_combiner
from gatekeeper.abac.engine import PolicyEngine
from gatekeeper.abac.interfaces import AttributeProvider, Policy
from gatekeeper.abac.policies import BUILTIN_POLICIES
from gatekeeper.config.models import GatekeeperConfig
from gatekeeper.errors import AuthorizationError, EvaluationError
from gatekeeper.models import AccessRequest, AuthContext, Permission, Resource, Role, as_str
from gatekeeper.plugins.loader import PluginLoader
from gatekeeper.rbac.registry import RoleRegistry

logger = logging.getLogger(__name__)


class UnifiedAuthorizer:
    """Grants a request only when both the role table and the policies allow it.

    Flow:
    1. RBAC: a role without the permission is denied immediately and the
       policy engine is never touched (no attribute loading either).
    2. ABAC: the engine evaluates the applicable policies.

    ``is_authorized`` returns False for a denial and raises
    AuthorizationError when the decision could not be made. Callers must treat
    both as "access denied".
    """

    def __init__(self, registry: RoleRegistry, engine: PolicyEngine) -> None:
        self._registry = registry
        self._engine = engine

    @property
    def registry(self) -> RoleRegistry:
        return self._registry

    @property
    def engine(self) -> PolicyEngine:
        return self._engine

    async def is_authorized(self, request: AccessRequest) -> bool:
        started = time.perf_counter()
        try:
            return await self._authorize(request)
        finally:
            logger.debug(
                "Authorization check completed user_id=%s action=%s resource_type=%s "
                "resource_id=%s duration_ms=%.2f",
                request.subject.user_id,
                request.action,
                request.resource.type,
                request.resource.id,
                (time.perf_counter() - started) * 1000,
            )

    async def _authorize(self, request: AccessRequest) -> bool:
        subject, resource = request.subject, request.resource

        if not self._registry.has_permission(subject.role, request.action):
            logger.info(
                "Access denied by RBAC user_id=%s role=%s permission=%s resource_type=%s resource_id=%s",
                subject.user_id,
                subject.role,
                request.action,
                resource.type,
                resource.id,
            )
            return False

        try:
            allowed = await self._engine.evaluate(request)
        except EvaluationError as e:
            logger.error(
                "ABAC evaluation failed user_id=%s action=%s error=%s",
                subject.user_id,
                request.action,
                e,
            )
            raise AuthorizationError(subject.user_id, request.action, e) from e

        if not allowed:
            logger.info(
                "Access denied by ABAC user_id=%s role=%s permission=%s resource_type=%s resource_id=%s",
                subject.user_id,
                subject.role,
                request.action,
                resource.type,
                resource.id,
            )
            return False

        logger.info(
            "Access granted user_id=%s role=%s permission=%s resource_type=%s resource_id=%s",
            subject.user_id,
            subject.role,
            request.action,
            resource.type,
            resource.id,
        )
        return True

    # -- Pass-throughs ---------------------------------------------------------

    def get_user_permissions(self, role: str | Role) -> list[str]:
        return self._registry.get_user_permissions(role)

    def check_role_permission(self, role: str | Role, permission: str | Permission) -> bool:
        return self._registry.has_permission(role, permission)

    async def check_attribute_based_access(self, request: AccessRequest) -> bool:
        return await self._engine.evaluate(request)

    def register_policy(self, policy: Policy) -> None:
        self._engine.register_policy(policy)

    def register_attribute_provider(self, provider: AttributeProvider) -> None:
        self._engine.register_attribute_provider(provider)

    def builder(self) -> AuthorizationBuilder:
        return AuthorizationBuilder(self)


class AuthorizationBuilder:
    """Fluent construction of an AccessRequest, checked against an authorizer.

        allowed = await (
            authorizer.builder()
            .for_user("u1", Role.student)
            .on_resource("internship", "i1")
            .with_action(Permission.view_lectures)
            .with_resource_attribute("internship_id", "i1")
            .check()
        )
    """

    def __init__(self, authorizer: UnifiedAuthorizer) -> None:
        self._authorizer = authorizer
        self._request = AccessRequest(
            subject=AuthContext(user_id="", role=""),
            resource=Resource(type=""),
            action="",
        )

    def for_user(
        self, user_id: str, role: str | Role, email: str = "", phone: str = ""
    ) -> AuthorizationBuilder:
        subject = self._request.subject
        subject.user_id = user_id
        subject.role = as_str(role)
        subject.email = email
        subject.phone = phone
        return self

    def on_resource(self, resource_type: str, resource_id: str = "") -> AuthorizationBuilder:
        self._request.resource.type = resource_type
        self._request.resource.id = resource_id
        return self

    def with_action(self, action: str | Permission) -> AuthorizationBuilder:
        self._request.action = as_str(action)
        return self

    def with_user_attribute(self, key: str, value: Any) -> AuthorizationBuilder:
        self._request.subject.attributes[key] = value
        return self

    def with_resource_attribute(self, key: str, value: Any) -> AuthorizationBuilder:
        self._request.resource.attributes[key] = value
        return self

    def with_context(self, key: str, value: Any) -> AuthorizationBuilder:
        self._request.context[key] = value
        return self

    def build(self) -> AccessRequest:
        return self._request

    async def check(self) -> bool:
        return await self._authorizer.is_authorized(self._request)

    def check_rbac_only(self) -> bool:
        return self._authorizer.check_role_permission(
            self._request.subject.role, self._request.action
        )

    async def check_abac_only(self) -> bool:
        return await self._authorizer.check_attribute_based_access(self._request)


def create_authorizer(
    config: GatekeeperConfig | None = None,
    plugin_loader: PluginLoader | None = None,
) -> UnifiedAuthorizer:
    """Build a registry and an engine from config and wire them together.

    Built-in policies are registered first, in the configured order, followed
    by entry-point policies. A plugin combiner overrides ``abac.combiner``.
    """
    config = config or GatekeeperConfig()
    loader = plugin_loader if plugin_loader is not None else PluginLoader(config)

    registry = RoleRegistry(config.rbac.role_permissions)

    plugin_policies, providers, plugin_combiner = loader.load_configured()
    policies = [BUILTIN_POLICIES[name]() for name in config.abac.policies]
    cache = DecisionCache(
        ttl=timedelta(seconds=config.cache.ttl_seconds),
        max_entries=config.cache.max_entries,
    )
    engine = PolicyEngine(
        policies=[*policies, *plugin_policies],
        combiner=(
            plugin_combiner
            if plugin_combiner is not None
            else create_combiner(config.abac.combiner)
        ),
        cache=cache,
        use_cache=config.cache.enabled,
    )
    for provider in providers:
        engine.register_attribute_provider(provider)

    return UnifiedAuthorizer(registry, engine)
