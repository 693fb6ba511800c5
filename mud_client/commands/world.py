from __future__ import annotations

from mud_client.api.models import Item, Player
from mud_client.commands.context import CommandContext
from mud_client.commands.formatting import format_stats, room_lines
from mud_client.core.errors import UnresolvedReference
from mud_client.core.result import Ok, unwrap
from mud_client.resolver import (
    describe_container_contents,
    describe_item,
    resolve_exit,
    resolve_item,
    resolve_player,
)

# Handlers for verbs that act on the shared world return no lines on success: the
# backend narrates the outcome to everyone involved and the message poller shows it.


async def go(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    token = args["exit"].strip()
    room = ctx.room
    exit_id = resolve_exit(token, room.exits) if room is not None else None
    if exit_id is None:
        raise UnresolvedReference(f"No matching exit found for '{token}'")

    unwrap(await ctx.actor.use_exit(exit_id))
    # Refresh the cached room now instead of waiting for the next tick.
    await ctx.room_sync.poll()
    return []


async def say(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    unwrap(await ctx.actor.say(args["text"].strip()))
    return []


async def whisper(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    unwrap(await ctx.actor.whisper(args["player"], args["text"].strip()))
    return []


async def attack(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    unwrap(await ctx.actor.attack(args["player"]))
    return []


async def respawn(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    unwrap(await ctx.actor.respawn())
    return []


async def create_character(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    unwrap(await ctx.actor.create_character())
    return []


async def stats(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    return format_stats(unwrap(await ctx.actor.get_stats()))


async def whois(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    principal = args["principal"]
    name = await ctx.actor.get_player_name(principal)
    if name is None:
        return [f"No player is registered for {principal}."]
    return [f"{principal} is {name}."]


async def _look_room(ctx: CommandContext) -> list[str]:
    snapshot = ctx.room_state.snapshot
    if snapshot is None:
        return ["You can't see anything."]

    floor_items: list[Item] = []
    res = await ctx.actor.get_room_items(snapshot.room.id)
    if isinstance(res, Ok):
        floor_items = res.value

    return room_lines(
        snapshot.room,
        players=snapshot.players,
        floor_items=floor_items,
        viewer_name=ctx.player_name,
    )


def _look_player(ctx: CommandContext, player: Player) -> list[str]:
    if player.name == ctx.player_name:
        return ["You look yourself over. Try /stats for the details."]
    return [f"{player.name} is here."]


async def _look_item(ctx: CommandContext, item_id: int) -> list[str]:
    item = unwrap(await ctx.actor.get_item(item_id))
    lines = [describe_item(item)]
    if item.item_type.description:
        lines.append(item.item_type.description)

    if item.is_container:
        if not item.is_open:
            lines.append("It is closed.")
        else:
            lines.append("It contains:")
            lines.extend(await describe_container_contents(ctx.actor, item.id))
    return lines


async def look(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    target = args["target"].strip()
    if not target:
        return await _look_room(ctx)

    player = resolve_player(target, ctx.room_state.players, exact=False)
    if player is not None:
        return _look_player(ctx, player)

    try:
        resolved = await resolve_item(target, actor=ctx.actor, room_id=ctx.room_id)
    except UnresolvedReference:
        raise UnresolvedReference(f"You don't see '{target}' here.") from None
    return await _look_item(ctx, resolved.id)
