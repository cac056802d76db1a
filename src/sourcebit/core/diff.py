"""Structural diff between arbitrary JSON-like values.

Pure functions, no engine state. ``diff(x, x)`` is empty for every ``x``.

Mappings are compared key by key (keys of the old value first, in order,
then keys only present in the new value). Sequences are compared index by
index; trailing items are reported as added or removed. Anything else is
compared with ``==`` and reported as a single change at its path.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from sourcebit.contracts import DATA_BUCKETS, DIFFS_KEY, DiffEntry, DiffKind


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def diff(old: Any, new: Any) -> list[DiffEntry]:
    """Compute the ordered list of differences from ``old`` to ``new``.

    Args:
        old: Previous value
        new: Current value

    Returns:
        DiffEntry records, empty when the values are structurally equal
    """
    entries: list[DiffEntry] = []
    _diff_into(entries, (), old, new)
    return entries


def _diff_into(entries: list[DiffEntry], path: tuple[str | int, ...], old: Any, new: Any) -> None:
    if old is new:
        return

    if isinstance(old, Mapping) and isinstance(new, Mapping):
        for key in old:
            if key in new:
                _diff_into(entries, (*path, key), old[key], new[key])
            else:
                entries.append(DiffEntry((*path, key), DiffKind.REMOVED, old=old[key]))
        for key in new:
            if key not in old:
                entries.append(DiffEntry((*path, key), DiffKind.ADDED, new=new[key]))
        return

    if _is_sequence(old) and _is_sequence(new):
        shared = min(len(old), len(new))
        for index in range(shared):
            _diff_into(entries, (*path, index), old[index], new[index])
        for index in range(shared, len(old)):
            entries.append(DiffEntry((*path, index), DiffKind.REMOVED, old=old[index]))
        for index in range(shared, len(new)):
            entries.append(DiffEntry((*path, index), DiffKind.ADDED, new=new[index]))
        return

    # bool is an int subclass; True == 1 must still count as a change
    if type(old) is not type(new) or old != new:
        entries.append(DiffEntry(path, DiffKind.CHANGED, old=old, new=new))


def diff_buckets(
    previous: Mapping[str, Any], current: Mapping[str, Any]
) -> dict[str, list[DiffEntry]]:
    """Diff two data bags bucket by bucket.

    Every standard bucket is always present in the result; extra buckets
    contributed by plugins are included when either bag has them.

    Args:
        previous: Bag from the previous completed run
        current: Bag for the current run

    Returns:
        Mapping of bucket name to its DiffEntry list
    """
    buckets = list(DATA_BUCKETS)
    for bag in (previous, current):
        for key in bag:
            if key != DIFFS_KEY and key not in buckets:
                buckets.append(key)

    return {
        bucket: diff(previous.get(bucket, []), current.get(bucket, []))
        for bucket in buckets
    }
