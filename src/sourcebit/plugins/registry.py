"""Normalization of the configured plugin list into descriptors.

Accepted plugin list entries:
- a bare callable: a transform-only plugin, ``fn(data, ctx)``
- a plugin object exposing any subset of the hooks
- a mapping ``{"module": ..., "options": {...}}`` where ``module`` is a
  plugin object, a callable, a registered plugin name, or a dotted import
  path (``package.module`` or ``package.module:attribute``)

Hook presence is probed once here and recorded on the descriptor, so the
engine never has to type-probe plugins again.
"""

import importlib
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any

from sourcebit.contracts import ConfigurationError
from sourcebit.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

HOOK_NAMES: tuple[str, ...] = (
    "bootstrap",
    "transform",
    "on_transform_start",
    "on_transform_end",
)


@dataclass(frozen=True)
class PluginHooks:
    """Hook callables found on a plugin (None when absent)."""

    bootstrap: Callable[..., Any] | None = None
    transform: Callable[..., Any] | None = None
    on_transform_start: Callable[..., Any] | None = None
    on_transform_end: Callable[..., Any] | None = None

    @classmethod
    def probe(cls, module: Any) -> "PluginHooks":
        """Collect the callable hooks exposed by a plugin object."""
        found: dict[str, Callable[..., Any]] = {}
        for hook_name in HOOK_NAMES:
            hook = getattr(module, hook_name, None)
            if callable(hook):
                found[hook_name] = hook
        return cls(**found)

    @property
    def has_bootstrap(self) -> bool:
        return self.bootstrap is not None

    @property
    def has_transform(self) -> bool:
        return self.transform is not None

    @property
    def has_on_transform_start(self) -> bool:
        return self.on_transform_start is not None

    @property
    def has_on_transform_end(self) -> bool:
        return self.on_transform_end is not None


@dataclass
class PluginDescriptor:
    """Registration record for one entry of the plugin list.

    ``bootstrapped`` starts False and is set True once, by the engine,
    after the plugin's bootstrap hook completes (or straight away if it has
    none). It is never reset.
    """

    name: str
    module: Any
    hooks: PluginHooks
    declared_options: Mapping[str, Any] | None = None
    config_options: dict[str, Any] = field(default_factory=dict)
    bootstrapped: bool = False

    def mark_bootstrapped(self) -> None:
        self.bootstrapped = True


def default_plugin_name(index: int) -> str:
    """Placeholder namespace for a plugin that does not declare a name."""
    return f"plugin-{index}"


def import_plugin(reference: str) -> Any:
    """Import a plugin from a dotted path.

    ``package.module`` imports the module itself; ``package.module:attr``
    returns an attribute of it.

    Raises:
        ConfigurationError: If the module or attribute cannot be found
    """
    module_path, _, attribute = reference.partition(":")
    try:
        module: ModuleType = importlib.import_module(module_path)
    except ImportError as e:
        raise ConfigurationError(f"Could not import plugin '{reference}': {e}") from e

    if not attribute:
        return module
    try:
        return getattr(module, attribute)
    except AttributeError:
        raise ConfigurationError(
            f"Plugin module '{module_path}' has no attribute '{attribute}'"
        ) from None


def resolve_module(reference: Any, manager: PluginManager | None = None) -> Any:
    """Turn a plugin reference into a plugin object.

    String references are looked up by registered name first, then
    imported as a dotted path.
    """
    if not isinstance(reference, str):
        return reference
    if manager is not None:
        plugin = manager.get_plugin_by_name(reference)
        if plugin is not None:
            return plugin
    return import_plugin(reference)


def build_descriptor(
    entry: Any, index: int, manager: PluginManager | None = None
) -> PluginDescriptor:
    """Build the descriptor for one plugin list entry.

    Args:
        entry: Plugin list entry (callable, plugin object, or mapping)
        index: Position of the entry in the plugin list
        manager: Optional manager for resolving registered plugin names

    Returns:
        PluginDescriptor with hooks probed and options captured

    Raises:
        ConfigurationError: If the entry cannot be interpreted as a plugin
    """
    config_options: Mapping[str, Any] = {}

    if isinstance(entry, Mapping):
        if "module" not in entry:
            raise ConfigurationError(f"Plugin entry {index} has no 'module'")
        module = resolve_module(entry["module"], manager)
        config_options = entry.get("options") or {}
        if not isinstance(config_options, Mapping):
            raise ConfigurationError(f"Options for plugin entry {index} must be a mapping")
    elif entry is None or isinstance(entry, (str, int, float, bool)):
        raise ConfigurationError(f"Plugin entry {index} is not a plugin: {entry!r}")
    else:
        module = entry

    # A bare function (not a module or plugin object with hooks) is a transform
    if callable(module) and not isinstance(module, ModuleType) and not any(
        callable(getattr(module, hook_name, None)) for hook_name in HOOK_NAMES
    ):
        hooks = PluginHooks(transform=module)
        declared_options = None
        name = default_plugin_name(index)
    else:
        hooks = PluginHooks.probe(module)
        declared_options = getattr(module, "options", None)
        if declared_options is not None and not isinstance(declared_options, Mapping):
            declared_options = None
        declared_name = getattr(module, "name", None)
        name = declared_name if isinstance(declared_name, str) and declared_name else default_plugin_name(index)

    return PluginDescriptor(
        name=name,
        module=module,
        hooks=hooks,
        declared_options=declared_options,
        config_options=dict(config_options),
    )


def load_plugin_descriptors(
    entries: Any, manager: PluginManager | None = None
) -> list[PluginDescriptor]:
    """Normalize a whole plugin list.

    Raises:
        ConfigurationError: If the list is missing or an entry is malformed
    """
    if entries is None or isinstance(entries, (str, Mapping)):
        raise ConfigurationError("The plugin list must be a sequence of plugin entries")

    descriptors = [
        build_descriptor(entry, index, manager) for index, entry in enumerate(entries)
    ]

    seen: set[str] = set()
    for descriptor in descriptors:
        if descriptor.name in seen:
            logger.warning(
                "Plugin name '%s' appears more than once; these plugins share a context namespace",
                descriptor.name,
            )
        seen.add(descriptor.name)

    return descriptors
