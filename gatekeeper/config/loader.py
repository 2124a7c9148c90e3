"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import GatekeeperConfig


def load_config(cli_path: str | None = None) -> GatekeeperConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./gatekeeper.yaml"),
        Path.home() / ".gatekeeper" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return GatekeeperConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return GatekeeperConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `gatekeeper config init`
DEFAULT_CONFIG_TEMPLATE = """\
# gatekeeper.yaml

# Role -> permission table. Omit to use the built-in admin/instructor/student table.
# rbac:
#   role_permissions:
#     admin: ["internship:create", "internship:update", "users:manage"]
#     student: ["internship:view", "content:lectures:view"]

# Attribute-based policies
abac:
  combiner: "all-must-allow"   # all-must-allow | any-can-allow | priority-based | majority-wins
  policies:                    # registered in this order
    - EnrollmentBasedAccess
    - Ownership
    - TimeBasedAccess
    - ProgressBased
    # - ContentAccess

# Decision cache (keyed by user, action and resource; not by attributes)
cache:
  enabled: true
  ttl_seconds: 300
  max_entries: 1000            # expired entries are swept once this is exceeded

# Entry-point plugins (groups gatekeeper.policies / gatekeeper.attribute_providers / gatekeeper.combiners)
plugins:
  policies: []
  attribute_providers: []
  # combiner: "my-combiner"

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
