"""Attribute-based policy evaluation (ABAC)."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import Any

from gatekeeper.abac.cache import CacheKey, DecisionCache
from gatekeeper.abac.combiners import AllMustAllow
from gatekeeper.abac.interfaces import AttributeProvider, Policy, PolicyCombiner
from gatekeeper.abac.policies import default_policies
from gatekeeper.errors import (
    EvaluationError,
    PolicyAlreadyRegisteredError,
    PolicyNotFoundError,
    ProviderAlreadyRegisteredError,
    RegistrationError,
)
from gatekeeper.models import AccessRequest, Decision

logger = logging.getLogger(__name__)


def _merge_missing(target: dict[str, Any], incoming: dict[str, Any]) -> None:
    """Copy keys from ``incoming`` that ``target`` does not have yet."""
    for key, value in incoming.items():
        target.setdefault(key, value)


class PolicyEngine:
    """Evaluates registered policies against a request and caches the verdict.

    Providers and policies run inline on the caller's task, in registration
    order; the engine never schedules work of its own. Cancelling the calling
    task cancels whichever provider or policy is being awaited.

    All mutable state (policy list, provider list, combiner, cache) is guarded
    by one lock, held only between awaits.
    """

    def __init__(
        self,
        policies: Iterable[Policy] | None = None,
        combiner: PolicyCombiner | None = None,
        cache: DecisionCache | None = None,
        *,
        use_cache: bool = True,
    ) -> None:
        self._lock = threading.RLock()
        self._policies: list[Policy] = []
        self._providers: list[AttributeProvider] = []
        self._combiner: PolicyCombiner = combiner if combiner is not None else AllMustAllow()
        self._cache: DecisionCache | None = None
        if use_cache:
            self._cache = cache if cache is not None else DecisionCache()

        for policy in default_policies() if policies is None else policies:
            try:
                self.register_policy(policy)
            except RegistrationError as e:
                logger.error("Failed to register initial policy policy=%s error=%s", policy.name, e)

    # -- Evaluation ------------------------------------------------------------

    async def evaluate(self, request: AccessRequest) -> bool:
        """Return True if the applicable policies allow ``request``.

        Raises EvaluationError only when the engine itself cannot produce a
        decision; failing policies and providers are logged and skipped.
        """
        key = CacheKey.for_request(request)
        cached = self._get_cached(key)
        if cached is not None:
            logger.debug(
                "ABAC decision served from cache user_id=%s action=%s resource_type=%s allow=%s",
                request.subject.user_id,
                request.action,
                request.resource.type,
                cached.allow,
            )
            return cached.allow

        with self._lock:
            providers = list(self._providers)
            policies = list(self._policies)
            combiner = self._combiner

        await self._enrich(request, providers)
        decisions = await self._collect_decisions(request, policies)

        try:
            if not decisions:
                final = Decision(allow=True, reason="No applicable ABAC policies")
            else:
                final = combiner.combine(decisions)
            self._store(key, final)
        except Exception as e:
            logger.error(
                "ABAC evaluation failed user_id=%s action=%s combiner=%s error=%s",
                request.subject.user_id,
                request.action,
                combiner.name,
                e,
            )
            raise EvaluationError("policy decision could not be combined", e) from e

        logger.info(
            "ABAC evaluation completed user_id=%s action=%s resource_type=%s resource_id=%s "
            "allow=%s reason=%r policies_evaluated=%d",
            request.subject.user_id,
            request.action,
            request.resource.type,
            request.resource.id,
            final.allow,
            final.reason,
            len(decisions),
        )
        return final.allow

    async def _enrich(self, request: AccessRequest, providers: list[AttributeProvider]) -> None:
        """Fill missing attributes from each provider. Existing keys always win."""
        subject, resource = request.subject, request.resource
        for provider in providers:
            try:
                user_attrs = await provider.load_user_attributes(subject.user_id)
            except Exception as e:
                logger.warning(
                    "Failed to load user attributes provider=%s user_id=%s error=%s",
                    provider.name,
                    subject.user_id,
                    e,
                )
                continue
            _merge_missing(subject.attributes, user_attrs or {})

            if not resource.id:
                continue
            try:
                resource_attrs = await provider.load_resource_attributes(resource.type, resource.id)
            except Exception as e:
                logger.warning(
                    "Failed to load resource attributes provider=%s resource_type=%s "
                    "resource_id=%s error=%s",
                    provider.name,
                    resource.type,
                    resource.id,
                    e,
                )
                continue
            _merge_missing(resource.attributes, resource_attrs or {})

    async def _collect_decisions(
        self, request: AccessRequest, policies: list[Policy]
    ) -> list[Decision]:
        decisions: list[Decision] = []
        for policy in policies:
            try:
                if not policy.applies(request):
                    logger.debug(
                        "Policy not applicable policy=%s user_id=%s action=%s",
                        policy.name,
                        request.subject.user_id,
                        request.action,
                    )
                    continue
                decision = await policy.evaluate(request)
            except Exception as e:
                logger.error(
                    "Policy evaluation failed policy=%s user_id=%s error=%s",
                    policy.name,
                    request.subject.user_id,
                    e,
                )
                continue

            decision = decision.model_copy(update={"priority": policy.priority})
            decisions.append(decision)
            logger.debug(
                "Policy evaluated policy=%s allow=%s reason=%r user_id=%s",
                policy.name,
                decision.allow,
                decision.reason,
                request.subject.user_id,
            )
        return decisions

    # -- Cache -----------------------------------------------------------------

    def _get_cached(self, key: CacheKey) -> Decision | None:
        if self._cache is None:
            return None
        with self._lock:
            return self._cache.get(key)

    def _store(self, key: CacheKey, decision: Decision) -> None:
        if self._cache is None:
            return
        with self._lock:
            self._cache.put(key, decision)

    @property
    def cache(self) -> DecisionCache | None:
        """The decision cache in use, or None when caching is disabled."""
        return self._cache

    @property
    def cache_size(self) -> int:
        if self._cache is None:
            return 0
        with self._lock:
            return len(self._cache)

    def clear_cache(self) -> None:
        if self._cache is None:
            return
        with self._lock:
            self._cache.clear()

    def invalidate(self, user_id: str) -> int:
        """Drop every cached decision for ``user_id``. Returns the count removed."""
        if self._cache is None:
            return 0
        with self._lock:
            removed = self._cache.invalidate_user(user_id)
        logger.debug("ABAC cache invalidated user_id=%s removed=%d", user_id, removed)
        return removed

    # -- Registration ----------------------------------------------------------

    def register_policy(self, policy: Policy) -> None:
        with self._lock:
            if any(p.name == policy.name for p in self._policies):
                raise PolicyAlreadyRegisteredError(policy.name)
            self._policies.append(policy)
        logger.info("ABAC policy registered policy=%s priority=%d", policy.name, policy.priority)

    def unregister_policy(self, name: str) -> None:
        with self._lock:
            for i, policy in enumerate(self._policies):
                if policy.name == name:
                    del self._policies[i]
                    break
            else:
                raise PolicyNotFoundError(name)
        logger.info("ABAC policy unregistered policy=%s", name)

    def get_policies(self) -> list[Policy]:
        with self._lock:
            return list(self._policies)

    def register_attribute_provider(self, provider: AttributeProvider) -> None:
        with self._lock:
            if any(p.name == provider.name for p in self._providers):
                raise ProviderAlreadyRegisteredError(provider.name)
            self._providers.append(provider)
        logger.info("ABAC attribute provider registered provider=%s", provider.name)

    def get_attribute_providers(self) -> list[AttributeProvider]:
        with self._lock:
            return list(self._providers)

    def set_policy_combiner(self, combiner: PolicyCombiner) -> None:
        with self._lock:
            self._combiner = combiner
        logger.info("ABAC policy combiner set combiner=%s", combiner.name)

    @property
    def policy_combiner(self) -> PolicyCombiner:
        with self._lock:
            return self._combiner
