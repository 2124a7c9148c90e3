"""Gatekeeper - role-based and attribute-based authorization engine."""

from gatekeeper.abac import (
    AllMustAllow,
    AnyCanAllow,
    AttributeProvider,
    MajorityWins,
    Policy,
    PolicyCombiner,
    PolicyEngine,
    PriorityBased,
    StaticAttributeProvider,
)
from gatekeeper.authorizer import AuthorizationBuilder, UnifiedAuthorizer, create_authorizer
from gatekeeper.config import GatekeeperConfig, load_config
from gatekeeper.errors import (
    AuthorizationError,
    EvaluationError,
    GatekeeperError,
    PolicyAlreadyRegisteredError,
    PolicyNotFoundError,
    ProviderAlreadyRegisteredError,
    RegistrationError,
)
from gatekeeper.models import (
    AccessRequest,
    AuthContext,
    CachedDecision,
    Decision,
    Permission,
    Resource,
    Role,
)
from gatekeeper.rbac import RoleRegistry

__version__ = "0.1.0"

__all__ = [
    "AccessRequest",
    "AllMustAllow",
    "AnyCanAllow",
    "AttributeProvider",
    "AuthContext",
    "AuthorizationBuilder",
    "AuthorizationError",
    "CachedDecision",
    "Decision",
    "EvaluationError",
    "GatekeeperConfig",
    "GatekeeperError",
    "MajorityWins",
    "Permission",
    "Policy",
    "PolicyAlreadyRegisteredError",
    "PolicyCombiner",
    "PolicyEngine",
    "PolicyNotFoundError",
    "PriorityBased",
    "ProviderAlreadyRegisteredError",
    "RegistrationError",
    "Resource",
    "Role",
    "RoleRegistry",
    "StaticAttributeProvider",
    "UnifiedAuthorizer",
    "create_authorizer",
    "load_config",
]
