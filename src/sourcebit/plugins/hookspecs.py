# src/sourcebit/plugins/hookspecs.py
"""pluggy hook specifications for Sourcebit plugin packages.

Installed packages make their plugins available by name through these
hooks, so a settings file can say ``module: sourcebit-source-contentful``
instead of a dotted import path.

Usage (implementing a plugin package):
    from sourcebit.plugins.hookspecs import hookimpl

    class ContentfulPlugins:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def sourcebit_get_plugins(self):
            return [contentful_source]

Packages are discovered through the ``sourcebit`` entry point group.
"""

from typing import Any

import pluggy

# Project name for pluggy (also the entry point group)
PROJECT_NAME = "sourcebit"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for plugins to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class SourcebitPluginSpec:
    """Hook specifications for plugin packages."""

    @hookspec
    def sourcebit_get_plugins(self) -> list[Any]:  # type: ignore[empty-body]
        """Return plugin objects provided by this package.

        Each plugin must carry a ``name`` attribute, which is the name a
        settings file uses to refer to it.

        Returns:
            List of plugin objects (modules, instances, or namespaces)
        """
