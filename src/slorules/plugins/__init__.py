"""SLO processor plugins."""

from slorules.plugins import contrib, core
from slorules.plugins.base import (
    AppUtils,
    PluginFactory,
    PluginRegistry,
    PluginSpec,
    ProcessorFunc,
    ProcessorRequest,
    ProcessorResult,
    SLOProcessor,
    parse_config,
)


def default_registry() -> PluginRegistry:
    """Build a registry holding every built-in and contrib plugin."""
    registry = PluginRegistry()
    for module in [*core.PLUGINS, *contrib.PLUGINS]:
        registry.register(
            module.PLUGIN_ID,
            module.new_plugin,
            description=(module.__doc__ or "").strip().splitlines()[0],
        )
    return registry


__all__ = [
    "AppUtils",
    "PluginFactory",
    "PluginRegistry",
    "PluginSpec",
    "ProcessorFunc",
    "ProcessorRequest",
    "ProcessorResult",
    "SLOProcessor",
    "default_registry",
    "parse_config",
]
