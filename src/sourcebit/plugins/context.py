"""Capability objects handed to plugin hooks.

Each hook receives a context scoped to its own namespace. Context reads
always return copies, so plugins can never alias engine-internal state.

Example:
    def bootstrap(ctx: BootstrapContext) -> None:
        entries = fetch_entries(ctx.options["accessToken"])
        ctx.set_context({"entries": entries})
        ctx.log(f"Loaded {len(entries)} entries", "succeed")

    def transform(data: dict, ctx: TransformContext) -> dict:
        entries = ctx.get_context().get("entries", [])
        return {**data, "objects": data["objects"] + entries}
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sourcebit.core.logging import PluginLogger


@dataclass
class TransformContext:
    """Context passed to transform-phase hooks.

    ``get_context`` reads from the snapshot taken at the start of the run,
    not the live store, so a run sees one consistent view.
    """

    name: str
    options: dict[str, Any]
    get_context: Callable[[], Any]
    log: PluginLogger
    debug: logging.Logger


@dataclass
class BootstrapContext:
    """Context passed to the bootstrap hook.

    ``set_context`` shallow-merges into this plugin's namespace.
    ``refresh`` asks the engine for a new transform run; it may be called
    at any time, including long after bootstrap returned.
    """

    name: str
    options: dict[str, Any]
    get_context: Callable[[], Any]
    set_context: Callable[[Any], None]
    log: PluginLogger
    debug: logging.Logger
    refresh: Callable[[], None]
