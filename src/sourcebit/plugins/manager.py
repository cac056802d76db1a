"""Plugin manager for discovery and lookup by name.

Uses pluggy for hook-based registration of plugin packages.
"""

from typing import Any

import pluggy

from sourcebit.plugins.hookspecs import PROJECT_NAME, SourcebitPluginSpec


class PluginManager:
    """Manages discovery and lookup of named plugins.

    Usage:
        manager = PluginManager()
        manager.load_entrypoints()
        manager.register(MyPluginPackage())

        plugin = manager.get_plugin_by_name("sourcebit-source-mock")
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(SourcebitPluginSpec)

        # Cache - map name to plugin object for duplicate detection
        self._plugins: dict[str, Any] = {}

    def load_entrypoints(self) -> int:
        """Register plugin packages advertised under the ``sourcebit`` entry point group.

        Returns:
            Number of packages loaded
        """
        count = self._pm.load_setuptools_entrypoints(PROJECT_NAME)
        self._refresh_cache()
        return count

    def register(self, package: Any) -> None:
        """Register a plugin package.

        Args:
            package: Object implementing ``sourcebit_get_plugins``
        """
        self._pm.register(package)
        self._refresh_cache()

    def _refresh_cache(self) -> None:
        """Refresh the name cache from hooks.

        Raises:
            ValueError: If two packages provide a plugin with the same name
        """
        new_plugins: dict[str, Any] = {}

        for plugins in self._pm.hook.sourcebit_get_plugins():
            for plugin in plugins:
                try:
                    name = plugin.name
                except AttributeError:
                    raise ValueError(
                        f"Plugin {plugin!r} must define a 'name' attribute to be registered."
                    ) from None
                if name in new_plugins:
                    raise ValueError(f"Duplicate plugin name: '{name}'.")
                new_plugins[name] = plugin

        # All validated, update cache
        self._plugins = new_plugins

    def get_plugins(self) -> list[Any]:
        """Get all registered plugins."""
        return list(self._plugins.values())

    def get_plugin_by_name(self, name: str) -> Any | None:
        """Get plugin by name."""
        return self._plugins.get(name)
