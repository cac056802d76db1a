"""Plugin system: descriptors, hook contract, discovery via pluggy.

- Protocols: Type contract for plugin objects
- Context: Capability objects handed to hooks
- Registry: Plugin list normalization and hook probing
- Manager / Hookspecs: Discovery of installed plugins by name
"""

from sourcebit.plugins.context import BootstrapContext, TransformContext
from sourcebit.plugins.hookspecs import hookimpl, hookspec
from sourcebit.plugins.manager import PluginManager
from sourcebit.plugins.protocols import PluginProtocol, TransformFunction
from sourcebit.plugins.registry import (
    PluginDescriptor,
    PluginHooks,
    build_descriptor,
    load_plugin_descriptors,
)

__all__ = [
    # Context
    "BootstrapContext",
    "TransformContext",
    # Protocols
    "PluginProtocol",
    "TransformFunction",
    # Registry
    "PluginDescriptor",
    "PluginHooks",
    "build_descriptor",
    "load_plugin_descriptors",
    # Manager
    "PluginManager",
    # Hookspecs
    "hookimpl",
    "hookspec",
]
