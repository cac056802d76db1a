"""Sourcebit: plugin orchestration for content pipelines.

Runs an ordered list of plugins through a one-time bootstrap phase and a
repeatable transform phase, and writes the resulting files to disk.

Usage:
    import asyncio
    import sourcebit

    data = asyncio.run(sourcebit.fetch({"plugins": [my_source, my_target]}))
"""

from collections.abc import Mapping
from typing import Any

from sourcebit.contracts import ConfigurationError
from sourcebit.core.config import RuntimeParameters, SourcebitSettings
from sourcebit.engine.orchestrator import Sourcebit

__version__ = "0.1.0"


async def fetch(
    config: SourcebitSettings | Mapping[str, Any] | None,
    runtime_parameters: RuntimeParameters | dict[str, Any] | None = None,
) -> dict[str, Any] | None:
    """Bootstrap every plugin and run a single transform.

    Args:
        config: Settings object or mapping with a ``plugins`` list
        runtime_parameters: Runtime flags (cache, quiet, watch, ...)

    Returns:
        Final data bag, or None if bootstrap or transform failed

    Raises:
        ConfigurationError: If no configuration was supplied or it is malformed
    """
    if config is None:
        raise ConfigurationError("Could not find a valid Sourcebit configuration.")

    instance = Sourcebit.from_config(config, runtime_parameters)
    if await instance.bootstrap_all() is None:
        return None
    return await instance.transform()


__all__ = [
    "ConfigurationError",
    "RuntimeParameters",
    "Sourcebit",
    "SourcebitSettings",
    "__version__",
    "fetch",
]
