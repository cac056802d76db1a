"""Output reconciler: brings the files on disk in line with a run's output.

Per run:
1. Drop descriptors without a usable path
2. Resolve paths and group them, merging ``append`` entries
3. Delete files written by the previous run but absent from this one
4. Serialize each file and write it only if the text changed
5. Track the current paths so the next run can detect deletions

Every I/O failure is local to its path: it is logged, reported as False,
and never aborts the rest of the batch.
"""

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from sourcebit.contracts import FileDescriptor, LogStyle
from sourcebit.core.logging import CORE_NAMESPACE, PluginLogger
from sourcebit.core.writers import get_writer


@dataclass
class _PendingFile:
    path: Path
    format: str
    content: Any
    # True once content holds a list of appended entries
    accumulated: bool = False


@dataclass
class ReconcileReport:
    """Outcome of one reconcile pass (also kept for inspection in tests)."""

    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)
    deleted: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)


class FileReconciler:
    """Writes a run's file bucket to disk, skipping unchanged files.

    The reconciler is stateful across runs: it remembers the serialized
    text it last wrote for each path and the set of paths the last run
    produced.
    """

    def __init__(self, base_dir: Path | None = None, log: PluginLogger | None = None) -> None:
        self._base_dir = base_dir
        self._log = log or PluginLogger(CORE_NAMESPACE)
        self._written_content: dict[Path, str] = {}
        self._tracked_paths: set[Path] = set()
        self.last_report = ReconcileReport()

    @property
    def tracked_paths(self) -> frozenset[Path]:
        """Paths produced by the most recent reconcile."""
        return frozenset(self._tracked_paths)

    def resolve_path(self, raw_path: str) -> Path:
        """Resolve a descriptor path to a normalized absolute path."""
        base_dir = self._base_dir or Path.cwd()
        path = Path(raw_path)
        if not path.is_absolute():
            path = base_dir / path
        return Path(os.path.normpath(path.absolute()))

    def reconcile(self, files: Iterable[Any]) -> list[bool]:
        """Reconcile the disk with one run's file descriptors.

        Args:
            files: Raw entries from the data bag's ``files`` bucket

        Returns:
            One success flag per distinct output path, in first-seen order
        """
        report = ReconcileReport()
        grouped = self._group(files)

        for stale_path in sorted(self._tracked_paths - grouped.keys()):
            self._delete(stale_path, report)

        results = [self._write(pending, report) for pending in grouped.values()]

        self._tracked_paths = set(grouped)
        self.last_report = report
        return results

    def _group(self, files: Iterable[Any]) -> dict[Path, _PendingFile]:
        grouped: dict[Path, _PendingFile] = {}

        for raw in files or []:
            path = raw.get("path") if isinstance(raw, Mapping) else None
            if not isinstance(path, str) or not path:
                self._log(f"Skipping file without a valid path: {raw!r}", LogStyle.WARN)
                continue

            descriptor = FileDescriptor.from_dict(raw)
            resolved = self.resolve_path(descriptor.path)
            existing = grouped.get(resolved)

            if descriptor.append:
                if existing is None:
                    entries: list[Any] = []
                elif existing.accumulated:
                    entries = existing.content
                else:
                    entries = [existing.content]
                entries.append(descriptor.content)
                grouped[resolved] = _PendingFile(resolved, descriptor.format, entries, accumulated=True)
            else:
                grouped[resolved] = _PendingFile(resolved, descriptor.format, descriptor.content)

        return grouped

    def _delete(self, path: Path, report: ReconcileReport) -> None:
        self._written_content.pop(path, None)
        try:
            path.unlink()
        except FileNotFoundError:
            report.deleted.append(path)
            self._log(f"Deleted {path} (already gone)", LogStyle.SUCCEED)
        except (OSError, ValueError) as e:
            report.failed.append(path)
            self._log(f"Could not delete {path}: {e}", LogStyle.FAIL)
        else:
            report.deleted.append(path)
            self._log(f"Deleted {path}", LogStyle.SUCCEED)

    def _write(self, pending: _PendingFile, report: ReconcileReport) -> bool:
        writer = get_writer(pending.format)
        if writer is None:
            report.failed.append(pending.path)
            self._log(f"Unsupported format {pending.format!r} for {pending.path}", LogStyle.FAIL)
            return False

        try:
            text = writer(pending.content)
        except (TypeError, ValueError, AttributeError, yaml.YAMLError) as e:
            report.failed.append(pending.path)
            self._log(f"Could not serialize {pending.path}: {e}", LogStyle.FAIL)
            return False

        if self._written_content.get(pending.path) == text:
            report.unchanged.append(pending.path)
            return True

        try:
            pending.path.parent.mkdir(parents=True, exist_ok=True)
            pending.path.write_text(text, encoding="utf-8")
        except (OSError, ValueError) as e:
            report.failed.append(pending.path)
            self._log(f"Could not write {pending.path}: {e}", LogStyle.FAIL)
            return False

        self._written_content[pending.path] = text
        report.written.append(pending.path)
        self._log(f"Wrote {pending.path}", LogStyle.SUCCEED)
        return True
