from __future__ import annotations

from mud_client.accounts import Account, item_account, room_account
from mud_client.commands.context import CommandContext
from mud_client.core.errors import UnresolvedReference
from mud_client.core.result import unwrap
from mud_client.resolver import describe_container_contents, describe_item, resolve_item, resolve_player


def _count(args: dict[str, str]) -> int | None:
    raw = args.get("count") or ""
    return int(raw) if raw else None


def _require_room_id(ctx: CommandContext) -> int:
    room_id = ctx.room_id
    if room_id is None:
        raise UnresolvedReference("You don't know where you are yet.")
    return room_id


async def inventory(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    items = unwrap(await ctx.actor.get_items())
    if not items:
        return ["You are not carrying anything."]

    lines = ["You are carrying:"]
    for item in items:
        lines.append(f"  {describe_item(item)}")
        if item.is_container and item.is_open:
            lines.extend(await describe_container_contents(ctx.actor, item.id, indent="    "))
    return lines


async def pick(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    item = await resolve_item(args["item"], actor=ctx.actor, room_id=ctx.room_id)
    unwrap(await ctx.actor.transfer_item(item.id, ctx.account, _count(args)))
    return []


async def drop(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    room_id = _require_room_id(ctx)
    item = await resolve_item(args["item"], actor=ctx.actor, include_room=False)
    to = room_account(backend_canister_id=ctx.backend_canister_id, room_id=room_id)
    unwrap(await ctx.actor.transfer_item(item.id, to, _count(args)))
    return []


async def give(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    # Handing items over is irreversible, so the name must match exactly.
    player = resolve_player(args["player"], ctx.room_state.players, exact=True)
    if player is None:
        raise UnresolvedReference(f"No player named '{args['player']}' here.")

    item = await resolve_item(args["item"], actor=ctx.actor, include_room=False)
    unwrap(await ctx.actor.transfer_item(item.id, Account(owner=player.principal)))
    return []


async def put(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    item = await resolve_item(args["item"], actor=ctx.actor, include_room=False)
    container = await resolve_item(args["container"], actor=ctx.actor, room_id=ctx.room_id)
    if item.id == container.id:
        return ["You can't put something inside itself."]

    to = item_account(backend_canister_id=ctx.backend_canister_id, item_id=container.id)
    unwrap(await ctx.actor.transfer_item(item.id, to))
    return []


async def _set_open(ctx: CommandContext, token: str, *, want_open: bool) -> list[str]:
    resolved = await resolve_item(token, actor=ctx.actor, room_id=ctx.room_id)
    item = unwrap(await ctx.actor.get_item(resolved.id))
    if not item.is_container:
        return [f"The {item.name} is not a container."]
    if item.is_open == want_open:
        return [f"The {item.name} is already {'open' if want_open else 'closed'}."]

    now_open = unwrap(await ctx.actor.toggle_container(item.id))
    return [f"You {'open' if now_open else 'close'} the {item.name}."]


async def open_container(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    return await _set_open(ctx, args["item"], want_open=True)


async def close_container(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    return await _set_open(ctx, args["item"], want_open=False)
