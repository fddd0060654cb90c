"""Plugin descriptors and the registry the client composes them into."""

from kieai.core.plugins.models import DependencySpec, Plugin, PluginContext, PluginMetadata
from kieai.core.plugins.registry import PluginRegistry

__all__ = [
    "DependencySpec",
    "Plugin",
    "PluginContext",
    "PluginMetadata",
    "PluginRegistry",
]
