"""Dynamic plugin discovery and loading via entry points."""

from __future__ import annotations

import importlib.metadata
from typing import TYPE_CHECKING

from gatekeeper.abac.combiners import combiner_names, create_combiner
from gatekeeper.abac.interfaces import AttributeProvider, Policy, PolicyCombiner
from gatekeeper.errors import GatekeeperError

if TYPE_CHECKING:
    from gatekeeper.config.models import GatekeeperConfig


class PluginNotFoundError(GatekeeperError):
    """Raised when a requested plugin cannot be found."""

    def __init__(self, plugin_type: str, name: str | None = None):
        self.plugin_type = plugin_type
        self.name = name
        msg = f"No {plugin_type} plugin found"
        if name:
            msg += f" with name '{name}'"
        super().__init__(msg)


class PluginLoader:
    """Discovers and instantiates policies, providers and combiners from entry points.

    An entry point may resolve to a class or to any zero-argument factory;
    it is called once per load.
    """

    # Entry point group names
    GROUPS = {
        "policy": "gatekeeper.policies",
        "attribute_provider": "gatekeeper.attribute_providers",
        "combiner": "gatekeeper.combiners",
    }

    def __init__(self, config: GatekeeperConfig | None = None):
        self._config = config

    def discover(self) -> dict[str, list[str]]:
        """Scan entry_points for registered plugins. Returns {type: [name, ...]}."""
        result: dict[str, list[str]] = {}
        for plugin_type, group in self.GROUPS.items():
            eps = importlib.metadata.entry_points(group=group)
            result[plugin_type] = [ep.name for ep in eps]
        return result

    def _load_from_entry_point(self, plugin_type: str, name: str) -> object | None:
        """Try to load a specific named entry point."""
        group = self.GROUPS[plugin_type]
        eps = importlib.metadata.entry_points(group=group)
        for ep in eps:
            if ep.name == name:
                return ep.load()
        return None

    def _instantiate(self, plugin_type: str, name: str) -> object:
        factory = self._load_from_entry_point(plugin_type, name)
        if factory is None:
            raise PluginNotFoundError(plugin_type, name)
        return factory()

    def load_policy(self, name: str) -> Policy:
        return self._instantiate("policy", name)

    def load_attribute_provider(self, name: str) -> AttributeProvider:
        return self._instantiate("attribute_provider", name)

    def load_combiner(self, name: str) -> PolicyCombiner:
        """Built-in combiner names resolve without an entry point."""
        if name in combiner_names():
            return create_combiner(name)
        return self._instantiate("combiner", name)

    def load_configured(self) -> tuple[list[Policy], list[AttributeProvider], PolicyCombiner | None]:
        """Load everything listed under ``plugins`` in the config, in order."""
        if self._config is None:
            return [], [], None
        plugins = self._config.plugins
        policies = [self.load_policy(n) for n in plugins.policies]
        providers = [self.load_attribute_provider(n) for n in plugins.attribute_providers]
        combiner = self.load_combiner(plugins.combiner) if plugins.combiner else None
        return policies, providers, combiner
