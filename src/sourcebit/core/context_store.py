"""Namespaced plugin state with on-disk JSON caching.

The store owns the only state shared across plugin invocations and across
transform runs. Reads always hand out deep copies; the namespace-scoped
shallow merge in ``set`` is the only mutation path.

Cache I/O never raises: a missing or corrupt cache file degrades to an empty
context, and a failed write is logged and skipped.
"""

import copy
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_CACHE_FILENAME = ".sourcebit-cache.json"


class ContextStore:
    """Mapping of plugin namespace to plugin-owned state.

    Usage:
        store = ContextStore(Path(".sourcebit-cache.json"))
        store.hydrate()
        store.set("my-plugin", {"entries": [...]})
        store.persist()
    """

    def __init__(self, cache_path: Path | None = None, *, enabled: bool = True) -> None:
        self._cache_path = cache_path or Path.cwd() / DEFAULT_CACHE_FILENAME
        self._enabled = enabled
        self._hydrated = False
        self._context: dict[str, Any] = {}

    @property
    def cache_path(self) -> Path:
        return self._cache_path

    @property
    def enabled(self) -> bool:
        """Whether the cache file is read and written at all."""
        return self._enabled

    def hydrate(self) -> dict[str, Any]:
        """Load the context from the cache file.

        Reads the file at most once per store. On any read or parse failure
        the context stays empty and the failure is logged.

        Returns:
            Deep copy of the context after hydration
        """
        if not self._enabled or self._hydrated:
            return self.snapshot()
        self._hydrated = True

        try:
            raw = self._cache_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No cache file found", path=str(self._cache_path))
            return self.snapshot()
        except OSError as e:
            logger.warning("Could not read cache file", path=str(self._cache_path), error=str(e))
            return self.snapshot()
        except UnicodeDecodeError as e:
            logger.warning("Could not decode cache file", path=str(self._cache_path), error=str(e))
            return self.snapshot()

        try:
            loaded = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Could not parse cache file", path=str(self._cache_path), error=str(e))
            return self.snapshot()

        if not isinstance(loaded, dict):
            logger.warning(
                "Ignoring cache file with non-object root",
                path=str(self._cache_path),
                root_type=type(loaded).__name__,
            )
            return self.snapshot()

        self._context = loaded
        return self.snapshot()

    def persist(self) -> bool:
        """Write the whole context to the cache file.

        Returns:
            True if the file was written, False if caching is disabled or
            the write failed
        """
        if not self._enabled:
            return False

        try:
            payload = json.dumps(self._context)
            self._cache_path.parent.mkdir(parents=True, exist_ok=True)
            self._cache_path.write_text(payload, encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not write cache file", path=str(self._cache_path), error=str(e))
            return False
        return True

    def get(self, namespace: str) -> Any:
        """Return a deep copy of a namespace's value, or {} if absent."""
        if namespace not in self._context:
            return {}
        return copy.deepcopy(self._context[namespace])

    def set(self, namespace: str, partial: Any) -> None:
        """Shallow-merge ``partial`` into a namespace's value.

        When either the existing value or ``partial`` is not a mapping, the
        namespace value is replaced.
        """
        existing = self._context.get(namespace)
        partial = copy.deepcopy(partial)
        if isinstance(existing, Mapping) and isinstance(partial, Mapping):
            self._context[namespace] = {**existing, **partial}
        else:
            self._context[namespace] = partial

    def snapshot(self) -> dict[str, Any]:
        """Return a deep copy of the whole context."""
        return copy.deepcopy(self._context)
