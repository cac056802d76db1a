"""Core infrastructure: Options, Context store, Diff, Writers, Configuration, Logging."""

from sourcebit.core.config import (
    PluginSettings,
    RuntimeParameters,
    SourcebitSettings,
    load_settings,
)
from sourcebit.core.context_store import (
    DEFAULT_CACHE_FILENAME,
    ContextStore,
)
from sourcebit.core.diff import diff, diff_buckets
from sourcebit.core.logging import (
    PluginLogger,
    configure_logging,
    get_debug_logger,
)
from sourcebit.core.options import resolve_options
from sourcebit.core.writers import (
    WRITERS,
    get_writer,
    write_frontmatter_markdown,
    write_json,
    write_yaml,
)

__all__ = [
    "DEFAULT_CACHE_FILENAME",
    "WRITERS",
    "ContextStore",
    "PluginLogger",
    "PluginSettings",
    "RuntimeParameters",
    "SourcebitSettings",
    "configure_logging",
    "diff",
    "diff_buckets",
    "get_debug_logger",
    "get_writer",
    "load_settings",
    "resolve_options",
    "write_frontmatter_markdown",
    "write_json",
    "write_yaml",
]
