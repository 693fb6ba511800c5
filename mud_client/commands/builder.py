from __future__ import annotations

from mud_client.api.models import ItemType
from mud_client.commands.context import CommandContext
from mud_client.core.errors import MalformedCommand, UnresolvedReference
from mud_client.core.result import unwrap
from mud_client.resolver import normalize_token

CREATE_ITEM_TYPE_USAGE = "Usage: /create_item_type <name> | <description> [| container=<capacity> stack=<max>]"


async def create_room(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    room_id = unwrap(await ctx.actor.create_room(args["name"].strip(), args["description"].strip()))
    return [f"Created room {room_id}."]


async def create_exit(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    room = ctx.room
    if room is None:
        raise UnresolvedReference("You don't know where you are yet.")

    unwrap(
        await ctx.actor.add_exit(
            room.id,
            args["exit_id"],
            args["name"].strip(),
            args["description"].strip(),
            int(args["target"]),
            args["direction"].casefold() or None,
        )
    )
    return [f"Created exit '{args['exit_id']}' from room {room.id} to room {args['target']}."]


def parse_item_type_options(text: str) -> tuple[int | None, int]:
    """Parse `container=<n>` / `stack=<n>` options; returns (capacity, stack_max)."""

    capacity: int | None = None
    stack_max = 1
    for part in text.split():
        key, sep, value = part.partition("=")
        if not sep or not value.isdigit():
            raise MalformedCommand(CREATE_ITEM_TYPE_USAGE)
        if key == "container":
            capacity = int(value)
        elif key == "stack":
            stack_max = int(value)
        else:
            raise MalformedCommand(CREATE_ITEM_TYPE_USAGE)
    if stack_max < 1:
        raise MalformedCommand(CREATE_ITEM_TYPE_USAGE)
    return capacity, stack_max


async def create_item_type(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    capacity, stack_max = parse_item_type_options(args["options"])
    type_id = unwrap(
        await ctx.actor.create_item_type(
            args["name"].strip(),
            args["description"].strip(),
            capacity is not None,
            capacity,
            stack_max,
        )
    )
    return [f"Created item type {type_id}."]


def match_item_type(token: str, types: list[ItemType]) -> ItemType | None:
    """Exact name first, then a unique name prefix."""

    norm = normalize_token(token)
    exact = [t for t in types if t.name.casefold() == norm]
    if exact:
        return exact[0]
    prefixed = [t for t in types if t.name.casefold().startswith(norm)]
    return prefixed[0] if len(prefixed) == 1 else None


async def create_item(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    token = args["type"].strip()
    count = int(args["count"]) if args["count"] else 1

    if token.isdigit():
        type_id = int(token)
    else:
        item_type = match_item_type(token, await ctx.actor.get_item_types())
        if item_type is None:
            raise UnresolvedReference(f"No matching item type found for '{token}'")
        type_id = item_type.id

    item_id = unwrap(await ctx.actor.create_item(type_id, count))
    return [f"Created item {item_id}."]
