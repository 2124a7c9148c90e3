"""Dynamic plugin discovery and loading."""

from gatekeeper.plugins.loader import PluginLoader, PluginNotFoundError

__all__ = ["PluginLoader", "PluginNotFoundError"]
