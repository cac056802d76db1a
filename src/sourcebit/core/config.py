"""
Configuration schema and loading for Sourcebit.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from sourcebit.contracts import PluginConfigError


class RuntimeParameters(BaseModel):
    """Parameters supplied at run time (CLI flags, framework integrations).

    Known flags are typed; any other key is kept as an extra so plugin
    option schemas can refer to it through ``runtime_parameter``.
    """

    model_config = {"frozen": True, "extra": "allow"}

    cache: bool = Field(
        default=True,
        description="Read and write the context cache file",
    )
    cache_path: Path | None = Field(
        default=None,
        description="Location of the cache file (default: ./.sourcebit-cache.json)",
    )
    quiet: bool = Field(
        default=False,
        description="Suppress the plugin log channel",
    )
    watch: bool = Field(
        default=False,
        description="Keep running so plugins can trigger refreshes",
    )

    @classmethod
    def coerce(cls, value: "RuntimeParameters | dict[str, Any] | None") -> "RuntimeParameters":
        """Accept an instance, a plain dict, or None."""
        if isinstance(value, cls):
            return value
        return cls(**(value or {}))

    def as_lookup(self) -> dict[str, Any]:
        """Parameters that were actually supplied (typed and extra).

        Typed flags left at their defaults are omitted so they never
        override a plugin's configured option.
        """
        return self.model_dump(exclude_unset=True)


class PluginSettings(BaseModel):
    """One entry of the plugin list in a settings file.

    Example YAML:
        plugins:
          - module: my_project.sources.periodic_table
            options:
              accessToken: abc123
    """

    model_config = {"frozen": True, "extra": "forbid"}

    module: str = Field(description="Dotted import path or registered plugin name")
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("module")
    @classmethod
    def validate_module_not_empty(cls, v: str) -> str:
        """Module reference cannot be blank."""
        if not v.strip():
            raise ValueError("module cannot be empty")
        return v


class SourcebitSettings(BaseModel):
    """Top-level settings file."""

    model_config = {"frozen": True, "extra": "forbid"}

    plugins: list[PluginSettings] = Field(
        min_length=1,
        description="Plugins in execution order",
    )

    def plugin_entries(self) -> list[dict[str, Any]]:
        """Plugin list in the shape accepted by Sourcebit.load_plugins()."""
        return [
            {"module": plugin.module, "options": dict(plugin.options)}
            for plugin in self.plugins
        ]


def load_settings(config_path: Path) -> SourcebitSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (SOURCEBIT_*) - highest priority
    2. Config file (sourcebit.yaml)

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated SourcebitSettings instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        PluginConfigError: If configuration fails validation
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="SOURCEBIT",
        settings_files=[str(config_path.resolve())],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    # Also filter out internal Dynaconf settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {
        k.lower(): v
        for k, v in dynaconf_settings.as_dict().items()
        if k not in internal_keys
    }

    try:
        return SourcebitSettings(**raw_config)
    except ValidationError as e:
        raise PluginConfigError(f"Invalid configuration in {config_path}: {e}") from e
