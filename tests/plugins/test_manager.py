# tests/plugins/test_manager.py
"""Tests for plugin manager."""

from types import SimpleNamespace

import pytest


class TestPluginManager:
    """Plugin discovery and registration."""

    def test_create_manager(self) -> None:
        from sourcebit.plugins.manager import PluginManager

        manager = PluginManager()
        assert manager.get_plugins() == []

    def test_register_plugin_package(self) -> None:
        from sourcebit.plugins.hookspecs import hookimpl
        from sourcebit.plugins.manager import PluginManager

        mock_source = SimpleNamespace(
            name="sourcebit-source-mock",
            bootstrap=lambda ctx: None,
        )

        class MockPackage:
            @hookimpl
            def sourcebit_get_plugins(self) -> list:
                return [mock_source]

        manager = PluginManager()
        manager.register(MockPackage())

        plugins = manager.get_plugins()
        assert len(plugins) == 1
        assert plugins[0].name == "sourcebit-source-mock"

    def test_get_plugin_by_name(self) -> None:
        from sourcebit.plugins.hookspecs import hookimpl
        from sourcebit.plugins.manager import PluginManager

        first = SimpleNamespace(name="first")
        second = SimpleNamespace(name="second")

        class Package:
            @hookimpl
            def sourcebit_get_plugins(self) -> list:
                return [first, second]

        manager = PluginManager()
        manager.register(Package())

        assert manager.get_plugin_by_name("second") is second
        assert manager.get_plugin_by_name("missing") is None

    def test_plugins_from_several_packages(self) -> None:
        from sourcebit.plugins.hookspecs import hookimpl
        from sourcebit.plugins.manager import PluginManager

        class PackageA:
            @hookimpl
            def sourcebit_get_plugins(self) -> list:
                return [SimpleNamespace(name="a")]

        class PackageB:
            @hookimpl
            def sourcebit_get_plugins(self) -> list:
                return [SimpleNamespace(name="b")]

        manager = PluginManager()
        manager.register(PackageA())
        manager.register(PackageB())

        assert sorted(p.name for p in manager.get_plugins()) == ["a", "b"]

    def test_duplicate_name_raises(self) -> None:
        from sourcebit.plugins.hookspecs import hookimpl
        from sourcebit.plugins.manager import PluginManager

        class PackageA:
            @hookimpl
            def sourcebit_get_plugins(self) -> list:
                return [SimpleNamespace(name="same")]

        class PackageB:
            @hookimpl
            def sourcebit_get_plugins(self) -> list:
                return [SimpleNamespace(name="same")]

        manager = PluginManager()
        manager.register(PackageA())

        with pytest.raises(ValueError, match="Duplicate plugin name"):
            manager.register(PackageB())

    def test_plugin_without_name_raises(self) -> None:
        from sourcebit.plugins.hookspecs import hookimpl
        from sourcebit.plugins.manager import PluginManager

        class Package:
            @hookimpl
            def sourcebit_get_plugins(self) -> list:
                return [SimpleNamespace(transform=lambda data, ctx: data)]

        manager = PluginManager()

        with pytest.raises(ValueError, match="must define a 'name'"):
            manager.register(Package())

    def test_load_entrypoints_without_packages(self) -> None:
        from sourcebit.plugins.manager import PluginManager

        manager = PluginManager()

        assert manager.load_entrypoints() >= 0
