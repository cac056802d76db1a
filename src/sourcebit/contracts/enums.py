"""Status codes, styles, and kinds used across subsystem boundaries."""

from enum import Enum


class LogStyle(str, Enum):
    """Presentation style of a log line on the plugin log channel.

    Uses (str, Enum) so plugins can pass either the member or the plain
    string ("succeed", "fail", ...).
    """

    SUCCEED = "succeed"
    FAIL = "fail"
    WARN = "warn"
    INFO = "info"

    @classmethod
    def coerce(cls, value: "LogStyle | str | None") -> "LogStyle":
        """Map an arbitrary style value onto a member, defaulting to INFO."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.INFO


class FileFormat(str, Enum):
    """Output formats understood by the file reconciler."""

    JSON = "json"
    FRONTMATTER_MD = "frontmatter-md"
    YML = "yml"


class DiffKind(str, Enum):
    """Kind of change recorded by the structural diff."""

    ADDED = "added"
    CHANGED = "changed"
    REMOVED = "removed"


class EngineState(str, Enum):
    """Lifecycle state of a Sourcebit engine."""

    IDLE = "idle"
    BOOTSTRAPPING = "bootstrapping"
    TRANSFORMING = "transforming"


class Phase(str, Enum):
    """Lifecycle phase a hook belongs to (used in error reports)."""

    BOOTSTRAP = "bootstrap"
    TRANSFORM = "transform"
    TRANSFORM_START = "on_transform_start"
    TRANSFORM_END = "on_transform_end"
