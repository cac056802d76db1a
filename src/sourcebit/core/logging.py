"""Logging setup and the per-plugin log channel.

Two channels exist side by side:
- the log channel: structlog events tagged with the plugin namespace and a
  LogStyle, silenced entirely by the ``quiet`` runtime parameter;
- the debug channel: a stdlib logger per namespace
  (``sourcebit.plugin.<name>``, ``sourcebit.core``), unaffected by ``quiet``
  and filtered only by the stdlib logging level.
"""

import logging
import sys
from typing import Any

import structlog

from sourcebit.contracts import LogStyle

CORE_NAMESPACE = "core"

_STYLE_LEVELS: dict[LogStyle, str] = {
    LogStyle.SUCCEED: "info",
    LogStyle.FAIL: "error",
    LogStyle.WARN: "warning",
    LogStyle.INFO: "info",
}


def configure_logging(*, json_output: bool = False, level: int = logging.INFO) -> None:
    """Configure structlog and stdlib logging for a CLI process.

    Library code never calls this; it is up to the host application.

    Args:
        json_output: Render events as JSON lines instead of console output
        level: Minimum level for both channels
    """
    logging.basicConfig(format="%(name)s: %(message)s", stream=sys.stderr, level=level)

    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_debug_logger(namespace: str) -> logging.Logger:
    """Return the stdlib debug logger for a plugin namespace (or the core)."""
    if namespace == CORE_NAMESPACE:
        return logging.getLogger("sourcebit.core")
    return logging.getLogger(f"sourcebit.plugin.{namespace}")


class PluginLogger:
    """Log channel scoped to one namespace.

    Instances are callable so plugins can write ``ctx.log("Fetched 3 entries",
    "succeed")``.
    """

    def __init__(self, namespace: str, *, quiet: bool = False) -> None:
        self.namespace = namespace
        self.quiet = quiet
        self._logger = structlog.get_logger("sourcebit")

    def log(self, message: str, style: LogStyle | str | None = LogStyle.INFO) -> None:
        """Emit one log line; unknown styles fall back to info."""
        if self.quiet:
            return
        resolved = LogStyle.coerce(style)
        emit = getattr(self._logger, _STYLE_LEVELS[resolved])
        emit(message, plugin=self.namespace, style=resolved.value)

    __call__ = log
