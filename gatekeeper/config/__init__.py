from .loader import load_config
from .models import (
    ABACConfig,
    CacheConfig,
    GatekeeperConfig,
    PluginsConfig,
    RBACConfig,
)

__all__ = [
    "ABACConfig",
    "CacheConfig",
    "GatekeeperConfig",
    "PluginsConfig",
    "RBACConfig",
    "load_config",
]
