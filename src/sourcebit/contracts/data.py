"""Data types exchanged between the engine and its plugins.

The transform data bag itself is a plain dict so plugins can build their
return value with ``{**data, "objects": [...]}``. The helpers here create
fresh bags and describe the pieces the engine reads out of them.
"""

from dataclasses import dataclass
from typing import Any

from sourcebit.contracts.enums import DiffKind

# Buckets present on every fresh data bag
DATA_BUCKETS: tuple[str, ...] = ("files", "models", "objects")

# Key under which the per-plugin diff is attached to the bag a hook receives
DIFFS_KEY = "diffs"


def empty_bag() -> dict[str, list[Any]]:
    """Create a fresh data bag with every bucket empty."""
    return {bucket: [] for bucket in DATA_BUCKETS}


@dataclass(frozen=True)
class DiffEntry:
    """One structural difference between two values.

    Attributes:
        path: Location of the change, as a tuple of keys / list indices
        kind: Whether the value was added, changed, or removed
        old: Previous value (None for additions)
        new: Current value (None for removals)
    """

    path: tuple[str | int, ...]
    kind: DiffKind
    old: Any = None
    new: Any = None


@dataclass(frozen=True)
class FileDescriptor:
    """A file a plugin wants on disk, after path resolution.

    Plugins contribute plain dicts (``{"path", "format", "content",
    "append"}``) to the ``files`` bucket; the reconciler turns the valid ones
    into FileDescriptors.
    """

    path: str
    format: str
    content: Any
    append: bool = False

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "FileDescriptor":
        return cls(
            path=raw["path"],
            format=raw.get("format", ""),
            content=raw.get("content"),
            append=bool(raw.get("append", False)),
        )
