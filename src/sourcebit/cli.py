# src/sourcebit/cli.py
"""Sourcebit Command Line Interface.

Entry point for the sourcebit CLI tool.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

import typer

from sourcebit import __version__
from sourcebit.contracts import ConfigurationError, PluginConfigError
from sourcebit.core.config import RuntimeParameters, SourcebitSettings, load_settings
from sourcebit.core.logging import configure_logging
from sourcebit.engine.orchestrator import Sourcebit
from sourcebit.plugins.manager import PluginManager
from sourcebit.plugins.registry import HOOK_NAMES

app = typer.Typer(
    name="sourcebit",
    help="Sourcebit: fetch content through a pipeline of plugins.",
    no_args_is_help=True,
)

DEFAULT_CONFIG = "sourcebit.yaml"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"sourcebit version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Sourcebit: fetch content through a pipeline of plugins."""
    pass


def _load_settings_or_exit(config: str) -> SourcebitSettings:
    config_path = Path(config)
    try:
        return load_settings(config_path)
    except FileNotFoundError:
        typer.echo(f"Error: Configuration file not found: {config}", err=True)
        raise typer.Exit(1) from None
    except PluginConfigError as e:
        typer.echo(f"Configuration errors:\n  {e}", err=True)
        raise typer.Exit(1) from None


def _plugin_manager() -> PluginManager:
    manager = PluginManager()
    manager.load_entrypoints()
    return manager


async def _run_fetch(
    settings: SourcebitSettings,
    runtime_parameters: RuntimeParameters,
    manager: PluginManager,
) -> dict[str, Any] | None:
    instance = Sourcebit.from_config(settings, runtime_parameters, plugin_manager=manager)
    if await instance.bootstrap_all() is None:
        return None
    data = await instance.transform()

    if runtime_parameters.watch:
        # Plugins drive further runs through refresh() until interrupted
        await asyncio.Event().wait()

    return data


@app.command()
def fetch(
    config: str = typer.Option(
        DEFAULT_CONFIG,
        "--config",
        "-c",
        help="Path to the configuration file.",
    ),
    cache: bool = typer.Option(
        False,
        "--cache",
        "-C",
        help="Use the filesystem cache even when not watching.",
    ),
    watch: bool = typer.Option(
        False,
        "--watch",
        "-w",
        help="Run continuously in watch mode.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Disable logging messages to the console.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug output from the engine and plugins.",
    ),
) -> None:
    """Bootstrap all plugins and write their output."""
    settings = _load_settings_or_exit(config)
    configure_logging(level=logging.DEBUG if verbose else logging.INFO)

    # Flags not given on the command line stay unset so plugin options win
    flags = {name: True for name, given in (("quiet", quiet), ("watch", watch)) if given}
    runtime_parameters = RuntimeParameters(cache=cache or watch, **flags)

    try:
        data = asyncio.run(_run_fetch(settings, runtime_parameters, _plugin_manager()))
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except KeyboardInterrupt:
        typer.echo("Stopped.")
        return

    if data is None:
        typer.echo("Fetch failed. See the log output above for details.", err=True)
        raise typer.Exit(1)

    if not quiet:
        typer.echo(f"\nFetch completed: {len(data.get('objects', []))} objects")
        typer.echo(f"  Files: {len(data.get('files', []))}")
        typer.echo(f"  Models: {len(data.get('models', []))}")


@app.command()
def validate(
    config: str = typer.Option(
        DEFAULT_CONFIG,
        "--config",
        "-c",
        help="Path to the configuration file.",
    ),
) -> None:
    """Validate the configuration and resolve every plugin without running."""
    settings = _load_settings_or_exit(config)

    try:
        instance = Sourcebit.from_config(
            settings, {"cache": False}, plugin_manager=_plugin_manager()
        )
    except ConfigurationError as e:
        typer.echo(f"Plugin error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"Configuration valid: {Path(config).name}")
    for index, descriptor in enumerate(instance.plugins):
        hooks = [
            hook_name
            for hook_name in HOOK_NAMES
            if getattr(descriptor.hooks, f"has_{hook_name}")
        ]
        typer.echo(f"  {index}: {descriptor.name} ({', '.join(hooks) or 'no hooks'})")


# Plugins subcommand group
plugins_app = typer.Typer(help="Plugin management commands.")
app.add_typer(plugins_app, name="plugins")


@plugins_app.command("list")
def plugins_list() -> None:
    """List plugins registered by installed packages."""
    plugins = _plugin_manager().get_plugins()

    if not plugins:
        typer.echo("No registered plugins found.")
        return

    typer.echo("\nPLUGINS:")
    for plugin in sorted(plugins, key=lambda p: p.name):
        description = (getattr(plugin, "__doc__", None) or "").strip().splitlines()
        typer.echo(f"  {plugin.name:32} - {description[0] if description else ''}")
    typer.echo()  # Final newline


if __name__ == "__main__":
    app()
