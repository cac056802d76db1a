"""Shared contracts for cross-boundary data types.

Import pattern:
    from sourcebit.contracts import LogStyle, FileFormat, empty_bag
"""

from sourcebit.contracts.enums import (
    DiffKind,
    EngineState,
    FileFormat,
    LogStyle,
    Phase,
)
from sourcebit.contracts.errors import (
    ConfigurationError,
    PluginConfigError,
    PluginContractError,
    PluginExecutionError,
)
from sourcebit.contracts.data import (
    DATA_BUCKETS,
    DIFFS_KEY,
    DiffEntry,
    FileDescriptor,
    empty_bag,
)

__all__ = [
    # enums
    "DiffKind",
    "EngineState",
    "FileFormat",
    "LogStyle",
    "Phase",
    # errors
    "ConfigurationError",
    "PluginConfigError",
    "PluginContractError",
    "PluginExecutionError",
    # data
    "DATA_BUCKETS",
    "DIFFS_KEY",
    "DiffEntry",
    "FileDescriptor",
    "empty_bag",
]
