"""Exception types raised across subsystem boundaries.

Taxonomy:
- ConfigurationError: the engine was handed something it cannot run
  (no config, malformed plugin entry). Fatal to the affected operation.
- PluginConfigError: a settings file failed validation.
- PluginExecutionError: a plugin hook raised. Wraps the original exception
  with the plugin name and lifecycle phase.
- PluginContractError: a plugin hook broke its contract (e.g. a transform
  returned something that is not a data bag).
"""

from sourcebit.contracts.enums import Phase


class ConfigurationError(Exception):
    """Raised when the engine configuration is missing or malformed."""


class PluginConfigError(ConfigurationError):
    """Raised when a settings file is invalid."""


class PluginExecutionError(Exception):
    """Raised when a plugin hook fails.

    Attributes:
        plugin_name: Namespace of the plugin whose hook failed
        phase: Lifecycle phase of the failing hook
    """

    def __init__(self, plugin_name: str, phase: Phase, message: str) -> None:
        super().__init__(f"Plugin '{plugin_name}' failed during {phase.value}: {message}")
        self.plugin_name = plugin_name
        self.phase = phase


class PluginContractError(PluginExecutionError):
    """Raised when a plugin hook returns a value that violates its contract."""
