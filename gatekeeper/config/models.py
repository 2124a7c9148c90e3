from pydantic import BaseModel, Field
from typing import Literal

PolicyName = Literal[
    "EnrollmentBasedAccess",
    "Ownership",
    "TimeBasedAccess",
    "ProgressBased",
    "ContentAccess",
]


class RBACConfig(BaseModel):
    # None keeps the built-in admin/instructor/student table
    role_permissions: dict[str, list[str]] | None = None


class ABACConfig(BaseModel):
    combiner: Literal["all-must-allow", "any-can-allow", "priority-based", "majority-wins"] = (
        "all-must-allow"
    )
    policies: list[PolicyName] = Field(
        default_factory=lambda: [
            "EnrollmentBasedAccess",
            "Ownership",
            "TimeBasedAccess",
            "ProgressBased",
        ]
    )


class CacheConfig(BaseModel):
    enabled: bool = True
    ttl_seconds: float = Field(default=300, gt=0)
    max_entries: int = Field(default=1000, gt=0)


class PluginsConfig(BaseModel):
    policies: list[str] = Field(default_factory=list)
    attribute_providers: list[str] = Field(default_factory=list)
    combiner: str | None = None


class GatekeeperConfig(BaseModel):
    rbac: RBACConfig = Field(default_factory=RBACConfig)
    abac: ABACConfig = Field(default_factory=ABACConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
