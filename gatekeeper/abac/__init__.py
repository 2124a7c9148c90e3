"""Attribute-based access control: engine, policies, combiners, providers."""

from gatekeeper.abac.cache import CacheKey, DecisionCache
from gatekeeper.abac.combiners import (
    AllMustAllow,
    AnyCanAllow,
    MajorityWins,
    PriorityBased,
    combiner_names,
    create_combiner,
)
from gatekeeper.abac.engine import PolicyEngine
from gatekeeper.abac.interfaces import AttributeProvider, Policy, PolicyCombiner
from gatekeeper.abac.policies import (
    BUILTIN_POLICIES,
    DEFAULT_POLICY_NAMES,
    ContentAccess,
    EnrollmentBasedAccess,
    Ownership,
    ProgressBased,
    TimeBasedAccess,
    default_policies,
)
from gatekeeper.abac.providers import StaticAttributeProvider

__all__ = [
    "AllMustAllow",
    "AnyCanAllow",
    "AttributeProvider",
    "BUILTIN_POLICIES",
    "CacheKey",
    "ContentAccess",
    "DEFAULT_POLICY_NAMES",
    "DecisionCache",
    "EnrollmentBasedAccess",
    "MajorityWins",
    "Ownership",
    "Policy",
    "PolicyCombiner",
    "PolicyEngine",
    "PriorityBased",
    "ProgressBased",
    "StaticAttributeProvider",
    "TimeBasedAccess",
    "combiner_names",
    "create_combiner",
    "default_policies",
]
