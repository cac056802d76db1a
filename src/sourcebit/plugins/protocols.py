"""Plugin protocol defining the hook contract.

Used for type checking, not runtime enforcement: every hook is optional,
and the registry probes for each one once at load time.

Lifecycle:
1. bootstrap(ctx) - once per engine lifetime, in declared order
2. on_transform_start(ctx) - notification at the start of every run
3. transform(data, ctx) - fold step, returns the next data bag
4. on_transform_end(data, ctx) - notification after output is written

Every hook may return an awaitable instead of a plain value.
"""

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sourcebit.plugins.context import BootstrapContext, TransformContext


@runtime_checkable
class PluginProtocol(Protocol):
    """Full shape of a plugin object.

    Example:
        name = "sourcebit-source-periodic-table"
        options = {
            "accessToken": {"env": "PERIODIC_TABLE_TOKEN", "runtime_parameter": "token"},
        }

        async def bootstrap(ctx):
            ctx.set_context({"elements": await fetch_elements(ctx.options)})

        def transform(data, ctx):
            elements = ctx.get_context().get("elements", [])
            return {**data, "objects": data["objects"] + elements}
    """

    name: str
    options: dict[str, Any]

    def bootstrap(self, ctx: "BootstrapContext") -> Awaitable[None] | None: ...

    def transform(
        self, data: dict[str, Any], ctx: "TransformContext"
    ) -> Awaitable[dict[str, Any]] | dict[str, Any]: ...

    def on_transform_start(self, ctx: "TransformContext") -> Awaitable[None] | None: ...

    def on_transform_end(
        self, data: dict[str, Any], ctx: "TransformContext"
    ) -> Awaitable[None] | None: ...


class TransformFunction(Protocol):
    """A bare callable in the plugin list, treated as a transform hook."""

    def __call__(
        self, data: dict[str, Any], ctx: "TransformContext"
    ) -> Awaitable[dict[str, Any]] | dict[str, Any]: ...
