"""Action definitions and bundle composition.

An action is a named, described operation with a small argument schema and
an async handler ``(agent, args) -> dict``. Actions are grouped into
bundles, and an ordered list of bundles is composed into the catalog before
any MCP server is built.
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..core.exceptions import ActionConflictError

if TYPE_CHECKING:
    from ..agent import SolanaAgent

ActionHandler = Callable[["SolanaAgent", dict[str, Any]], Awaitable[dict[str, Any]]]

_JSON_TYPES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
}


@dataclass(frozen=True)
class Action:
    """A named operation exposed as an MCP tool."""

    name: str
    description: str
    schema: dict[str, type]
    handler: ActionHandler
    optional: frozenset[str] = frozenset()

    def input_schema(self) -> dict[str, Any]:
        """JSON Schema for the action's arguments."""
        return {
            "type": "object",
            "properties": {
                arg: {"type": _JSON_TYPES.get(arg_type, "string")}
                for arg, arg_type in self.schema.items()
            },
            "required": [arg for arg in self.schema if arg not in self.optional],
        }

    async def __call__(self, agent: "SolanaAgent", args: dict[str, Any]) -> dict[str, Any]:
        return await self.handler(agent, args)


def action(
    name: str,
    description: str,
    schema: dict[str, type],
    optional: Iterable[str] = (),
) -> Callable[[ActionHandler], Action]:
    """Decorator turning an async handler into an Action.

    Example:
        @action("BALANCE", "Get SOL balance", {"address": str}, optional=["address"])
        async def balance(agent, args):
            ...
    """

    def decorator(handler: ActionHandler) -> Action:
        return Action(
            name=name,
            description=description,
            schema=schema,
            handler=handler,
            optional=frozenset(optional),
        )

    return decorator


@dataclass(frozen=True)
class ActionBundle:
    """A named group of actions contributed together."""

    name: str
    actions: tuple[Action, ...] = field(default_factory=tuple)


def compose_actions(bundles: Iterable[ActionBundle]) -> dict[str, Action]:
    """Merge bundles into one catalog, in bundle order.

    Raises:
        ActionConflictError: If two bundles (or one bundle twice) define the
            same action name.
    """
    catalog: dict[str, Action] = {}
    owners: dict[str, str] = {}
    for bundle in bundles:
        for item in bundle.actions:
            if item.name in catalog:
                raise ActionConflictError(item.name, owners[item.name], bundle.name)
            catalog[item.name] = item
            owners[item.name] = bundle.name
    return catalog
