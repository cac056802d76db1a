"""Sourcebit engine: plugin lifecycle coordination.

Coordinates:
- Plugin loading (plugin list -> descriptors)
- Bootstrap: one pass over all plugins, in order, populating the context
- Transform: folding a data bag through every bootstrapped plugin
- Output reconciliation of the final bag's files
- Reporting each run's outcome through ``on_transform``

Concurrency model: everything runs on one asyncio event loop. Hooks are
awaited one at a time, so between awaits the engine has exclusive access to
its own state. Transform runs are single-flight: a refresh arriving while a
run is in flight sets a queued flag, and any number of such refreshes
produce exactly one follow-up run.
"""

import asyncio
import copy
import functools
import inspect
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import structlog

from sourcebit.contracts import (
    DIFFS_KEY,
    EngineState,
    LogStyle,
    Phase,
    PluginContractError,
    PluginExecutionError,
    empty_bag,
)
from sourcebit.core.config import RuntimeParameters, SourcebitSettings
from sourcebit.core.context_store import DEFAULT_CACHE_FILENAME, ContextStore
from sourcebit.core.diff import diff_buckets
from sourcebit.core.logging import CORE_NAMESPACE, PluginLogger, get_debug_logger
from sourcebit.core.options import resolve_options
from sourcebit.engine.reconciler import FileReconciler
from sourcebit.plugins.context import BootstrapContext, TransformContext
from sourcebit.plugins.manager import PluginManager
from sourcebit.plugins.registry import (
    PluginDescriptor,
    default_plugin_name,
    load_plugin_descriptors,
)

logger = structlog.get_logger(__name__)

# Reporting channel: (error, None) on failure, (None, data) on success
TransformCallback = Callable[[Exception | None, dict[str, Any] | None], None]


class Sourcebit:
    """Runs a plugin list through bootstrap and transform.

    Usage:
        sourcebit = Sourcebit({"quiet": True})
        sourcebit.load_plugins([source_plugin, lambda data, ctx: data])
        await sourcebit.bootstrap_all()
        data = await sourcebit.transform()

    NOTE on refresh: plugins receive ``refresh`` during bootstrap and may
    call it at any later time (timers, webhooks). Refreshes while
    bootstrapping are ignored; refreshes while transforming queue a single
    follow-up run. Use ``await sourcebit.join()`` to wait for scheduled runs.
    """

    def __init__(
        self,
        runtime_parameters: RuntimeParameters | dict[str, Any] | None = None,
        *,
        base_dir: Path | None = None,
        plugin_manager: PluginManager | None = None,
        on_transform: TransformCallback | None = None,
    ) -> None:
        self.runtime_parameters = RuntimeParameters.coerce(runtime_parameters)
        self.on_transform = on_transform

        base_dir = base_dir or Path.cwd()
        cache_path = self.runtime_parameters.cache_path or base_dir / DEFAULT_CACHE_FILENAME
        self._context_store = ContextStore(cache_path, enabled=self.runtime_parameters.cache)
        self._plugin_manager = plugin_manager

        self.log = PluginLogger(CORE_NAMESPACE, quiet=self.runtime_parameters.quiet)
        self.debug = get_debug_logger(CORE_NAMESPACE)
        self._reconciler = FileReconciler(base_dir, log=self.log)

        self._plugins: list[PluginDescriptor] = []
        # Bag each plugin received (not returned) on the last completed run;
        # diffs compare a plugin's current input against this baseline
        self._data_for_plugin: dict[int, dict[str, Any]] = {}

        self._is_bootstrapping = False
        self._is_transforming = False
        self._is_transform_queued = False

        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending_run: asyncio.Task[Any] | None = None
        self._run_tasks: set[asyncio.Task[Any]] = set()
        self._notification_tasks: set[asyncio.Task[Any]] = set()

    @classmethod
    def from_config(
        cls,
        config: SourcebitSettings | Mapping[str, Any],
        runtime_parameters: RuntimeParameters | dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> "Sourcebit":
        """Build an engine with its context hydrated and plugins loaded."""
        if isinstance(config, SourcebitSettings):
            plugins: Any = config.plugin_entries()
        else:
            plugins = config.get("plugins", [])

        instance = cls(runtime_parameters, **kwargs)
        instance.load_context_from_cache()
        instance.load_plugins(plugins)
        return instance

    # === State ===

    @property
    def state(self) -> EngineState:
        if self._is_bootstrapping:
            return EngineState.BOOTSTRAPPING
        if self._is_transforming:
            return EngineState.TRANSFORMING
        return EngineState.IDLE

    @property
    def plugins(self) -> list[PluginDescriptor]:
        return list(self._plugins)

    @property
    def reconciler(self) -> FileReconciler:
        return self._reconciler

    @property
    def context_store(self) -> ContextStore:
        return self._context_store

    # === Plugins and options ===

    def load_plugins(self, plugins: Any) -> None:
        """Normalize the plugin list. Order is fixed from here on.

        Raises:
            ConfigurationError: If the list or one of its entries is malformed
        """
        self._plugins = load_plugin_descriptors(plugins, self._plugin_manager)
        self._data_for_plugin = {}
        self.debug.debug("Loaded %d plugins", len(self._plugins))

    def get_name_of_plugin_at_index(self, index: int) -> str:
        """Declared name of a plugin, or its ``plugin-<index>`` placeholder."""
        if 0 <= index < len(self._plugins):
            return self._plugins[index].name
        return default_plugin_name(index)

    def set_options_for_plugin_at_index(self, index: int, options: dict[str, Any]) -> None:
        """Replace the configured options block of one plugin."""
        self._plugins[index].config_options = dict(options)

    def get_options_for_plugin(self, descriptor: PluginDescriptor) -> dict[str, Any]:
        """Effective options for one invocation of a plugin's hooks."""
        return resolve_options(
            descriptor.declared_options,
            descriptor.config_options,
            self.runtime_parameters.as_lookup(),
        )

    # === Context ===

    def load_context_from_cache(self) -> dict[str, Any]:
        """Hydrate the context store from the cache file (at most once)."""
        return self._context_store.hydrate()

    def get_context(self) -> dict[str, Any]:
        """Deep copy of the whole context."""
        return self._context_store.snapshot()

    def get_plugin_context(self, namespace: str) -> Any:
        return self._context_store.get(namespace)

    def set_plugin_context(self, namespace: str, data: Any) -> None:
        self._context_store.set(namespace, data)

    # === Capability objects ===

    def _plugin_logger(self, descriptor: PluginDescriptor) -> PluginLogger:
        return PluginLogger(descriptor.name, quiet=self.runtime_parameters.quiet)

    def _bootstrap_context(self, descriptor: PluginDescriptor) -> BootstrapContext:
        name = descriptor.name
        return BootstrapContext(
            name=name,
            options=self.get_options_for_plugin(descriptor),
            get_context=lambda: self._context_store.get(name),
            set_context=lambda data: self._context_store.set(name, data),
            log=self._plugin_logger(descriptor),
            debug=get_debug_logger(name),
            refresh=self.refresh,
        )

    def _transform_context(
        self, descriptor: PluginDescriptor, snapshot: dict[str, Any]
    ) -> TransformContext:
        name = descriptor.name
        return TransformContext(
            name=name,
            options=self.get_options_for_plugin(descriptor),
            get_context=lambda: copy.deepcopy(snapshot.get(name, {})),
            log=self._plugin_logger(descriptor),
            debug=get_debug_logger(name),
        )

    async def _call_hook(
        self, descriptor: PluginDescriptor, phase: Phase, hook: Callable[..., Any], *args: Any
    ) -> Any:
        """Invoke a hook, awaiting its result if it returned an awaitable.

        Raises:
            PluginExecutionError: Wrapping whatever the hook raised
        """
        try:
            result = hook(*args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise PluginExecutionError(descriptor.name, phase, str(e) or type(e).__name__) from e
        return result

    # === Bootstrap ===

    async def bootstrap_all(self) -> dict[str, Any] | None:
        """Run every plugin's bootstrap hook once, in declared order.

        Hydrates the context first and persists it after the full pass.
        A failing hook aborts the rest of the pass; the failure is logged and
        reported through ``on_transform``, and the engine stays usable.

        Returns:
            Snapshot of the context after bootstrap, or None on failure

        Raises:
            RuntimeError: If a bootstrap pass is already running
        """
        if self._is_bootstrapping:
            raise RuntimeError("Bootstrap is already in progress")

        self._loop = asyncio.get_running_loop()
        self._context_store.hydrate()
        self._is_bootstrapping = True

        try:
            for descriptor in self._plugins:
                if descriptor.bootstrapped:
                    continue
                if descriptor.hooks.has_bootstrap:
                    self.debug.debug("Bootstrapping %s", descriptor.name)
                    await self._call_hook(
                        descriptor,
                        Phase.BOOTSTRAP,
                        descriptor.hooks.bootstrap,
                        self._bootstrap_context(descriptor),
                    )
                descriptor.mark_bootstrapped()
        except PluginExecutionError as e:
            logger.error("Bootstrap failed", plugin=e.plugin_name, error=str(e))
            self.log(str(e), LogStyle.FAIL)
            self._report(e, None)
            return None
        finally:
            self._is_bootstrapping = False

        self._context_store.persist()
        return self.get_context()

    # === Transform ===

    async def transform(self) -> dict[str, Any] | None:
        """Run the transform pipeline once, if no run is in flight.

        Returns:
            The final data bag, or None if the call started no run (engine
            bootstrapping or already transforming) or the run failed. Failures
            go to ``on_transform`` rather than being raised.
        """
        if self._is_bootstrapping:
            self.debug.debug("Transform requested during bootstrap; ignored")
            return None
        if self._is_transforming:
            self._is_transform_queued = True
            self.debug.debug("Transform requested while transforming; queued")
            return None

        self._is_transforming = True
        # A scheduled run that reached this point no longer absorbs refreshes
        self._pending_run = None
        data: dict[str, Any] | None = None
        try:
            data = await self._run_transform()
        except Exception as e:
            logger.error("Transform failed", error=str(e))
            self.log(f"Transform failed: {e}", LogStyle.FAIL)
            self._report(e, None)
        else:
            self._report(None, data)
        finally:
            self._is_transforming = False
            if self._is_transform_queued:
                self._is_transform_queued = False
                self._schedule_transform()

        return data

    async def _run_transform(self) -> dict[str, Any]:
        snapshot = self._context_store.snapshot()
        data: dict[str, Any] = empty_bag()
        active = [
            (index, descriptor)
            for index, descriptor in enumerate(self._plugins)
            if descriptor.bootstrapped
        ]
        contexts = {index: self._transform_context(descriptor, snapshot) for index, descriptor in active}

        for index, descriptor in active:
            if descriptor.hooks.has_on_transform_start:
                self._notify(descriptor, descriptor.hooks.on_transform_start, contexts[index])

        received: dict[int, dict[str, Any]] = {}
        end_hooks: list[tuple[PluginDescriptor, TransformContext]] = []

        for index, descriptor in active:
            previous = self._data_for_plugin.get(index) or empty_bag()
            diffs = diff_buckets(previous, data)
            received[index] = copy.deepcopy(data)

            if descriptor.hooks.has_transform:
                result = await self._call_hook(
                    descriptor,
                    Phase.TRANSFORM,
                    descriptor.hooks.transform,
                    {**data, DIFFS_KEY: diffs},
                    contexts[index],
                )
                if not isinstance(result, Mapping):
                    raise PluginContractError(
                        descriptor.name,
                        Phase.TRANSFORM,
                        f"transform must return a data bag, got {type(result).__name__}",
                    )
                data = {key: value for key, value in result.items() if key != DIFFS_KEY}

            if descriptor.hooks.has_on_transform_end:
                end_hooks.append((descriptor, contexts[index]))

        self._reconciler.reconcile(data.get("files") or [])

        for descriptor, ctx in end_hooks:
            await self._call_hook(
                descriptor, Phase.TRANSFORM_END, descriptor.hooks.on_transform_end, data, ctx
            )

        self._data_for_plugin.update(received)
        return data

    def _notify(self, descriptor: PluginDescriptor, hook: Callable[..., Any], ctx: TransformContext) -> None:
        """Fire a notification hook without awaiting it in the main chain."""
        try:
            result = hook(ctx)
        except Exception as e:
            logger.warning(
                "Notification hook failed",
                plugin=descriptor.name,
                phase=Phase.TRANSFORM_START.value,
                error=str(e),
            )
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._notification_tasks.add(task)
            task.add_done_callback(functools.partial(self._notification_done, descriptor.name))

    def _notification_done(self, plugin_name: str, task: "asyncio.Future[Any]") -> None:
        self._notification_tasks.discard(task)  # type: ignore[arg-type]
        if not task.cancelled() and task.exception() is not None:
            logger.warning(
                "Notification hook failed",
                plugin=plugin_name,
                phase=Phase.TRANSFORM_START.value,
                error=str(task.exception()),
            )

    def _report(self, error: Exception | None, data: dict[str, Any] | None) -> None:
        if self.on_transform is not None:
            self.on_transform(error, data)

    # === Refresh scheduling ===

    def refresh(self) -> None:
        """Ask for a transform run; safe to call from any plugin callback.

        Ignored while bootstrapping; queues one follow-up run while
        transforming; otherwise schedules a run on the event loop. Repeated
        calls before the scheduled run starts coalesce into it.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Called from outside the loop's thread (e.g. a watcher thread)
            if self._loop is None:
                raise RuntimeError("refresh() called before the engine started") from None
            self._loop.call_soon_threadsafe(self.refresh)
            return

        if self._is_bootstrapping:
            self.debug.debug("Refresh during bootstrap; ignored")
            return
        if self._is_transforming:
            self._is_transform_queued = True
            return
        self._schedule_transform()

    def _schedule_transform(self) -> None:
        if self._pending_run is not None and not self._pending_run.done():
            return
        task = asyncio.get_running_loop().create_task(self.transform())
        self._pending_run = task
        self._run_tasks.add(task)
        task.add_done_callback(self._run_tasks.discard)

    async def join(self) -> None:
        """Wait until every scheduled run (and follow-up) has finished."""
        while self._run_tasks or self._notification_tasks:
            if self._run_tasks:
                await asyncio.gather(*list(self._run_tasks))
            if self._notification_tasks:
                await asyncio.gather(*list(self._notification_tasks), return_exceptions=True)
