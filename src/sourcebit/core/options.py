"""Option resolution for plugin invocations.

Effective options are merged in ascending precedence:
1. Schema default (``env`` variable if defined, else ``default``)
2. Value from the user's plugin configuration block
3. Runtime parameter named by the schema's ``runtime_parameter``

This is a merge, not a validating parse: unknown config keys pass through
untouched and nothing here raises for missing values.
"""

import os
from collections.abc import Mapping
from typing import Any

# Both spellings are accepted for the runtime parameter key in a schema entry
_RUNTIME_PARAMETER_KEYS = ("runtime_parameter", "runtimeParameter")


def _schema_entry(entry: Any) -> Mapping[str, Any]:
    # A bare value in the schema is shorthand for {"default": value}
    if isinstance(entry, Mapping):
        return entry
    return {"default": entry}


def _runtime_parameter_name(entry: Mapping[str, Any]) -> str | None:
    for key in _RUNTIME_PARAMETER_KEYS:
        value = entry.get(key)
        if isinstance(value, str):
            return value
    return None


def resolve_options(
    schema: Mapping[str, Any] | None,
    config_options: Mapping[str, Any] | None,
    runtime_parameters: Mapping[str, Any] | None,
    *,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Compute the effective options for one plugin invocation.

    Args:
        schema: Option schema declared by the plugin (key -> OptionSchema)
        config_options: Options block from the user's plugin configuration
        runtime_parameters: Runtime parameters of the engine instance
        environ: Environment mapping (defaults to os.environ)

    Returns:
        New dict of effective option values
    """
    environ = os.environ if environ is None else environ
    config_options = config_options or {}
    runtime_parameters = runtime_parameters or {}

    # Undeclared keys pass through unchanged
    resolved: dict[str, Any] = dict(config_options)

    for key, raw_entry in (schema or {}).items():
        entry = _schema_entry(raw_entry)

        env_name = entry.get("env")
        if isinstance(env_name, str) and env_name in environ:
            resolved.setdefault(key, environ[env_name])
        elif "default" in entry:
            resolved.setdefault(key, entry["default"])

        parameter = _runtime_parameter_name(entry)
        if parameter is not None and runtime_parameters.get(parameter) is not None:
            resolved[key] = runtime_parameters[parameter]

    return resolved
