from __future__ import annotations

from mud_client.commands.context import CommandContext
from mud_client.core.errors import MalformedCommand
from mud_client.core.result import unwrap
from mud_client.preferences import get_wallet_preferences, save_wallet_preferences
from mud_client.wallet import balance_lines, registered_token_lines

SEND_USAGE = "Usage: /send <amount> <token> <recipient>"
WALLET_USAGE = "Usage: /wallet [send <amount> <token> <recipient> | hide | show | tokens | register <canister> | unregister <canister> | refresh [canister]]"


async def balances(ctx: CommandContext) -> list[str]:
    prefs = get_wallet_preferences(r=ctx.r, principal=ctx.account.owner)
    rows = await ctx.aggregator.get_all_balances(ctx.account, hide_zero_balances=prefs.hide_zero_balances)
    return balance_lines(rows)


async def send(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    return await ctx.transfers.request_transfer(args["amount"], args["token"], args["recipient"])


def _set_hide_zero(ctx: CommandContext, hide: bool) -> list[str]:
    prefs = get_wallet_preferences(r=ctx.r, principal=ctx.account.owner)
    prefs.hide_zero_balances = hide
    save_wallet_preferences(r=ctx.r, principal=ctx.account.owner, prefs=prefs)
    return ["Zero balances will be hidden." if hide else "Zero balances will be shown."]


async def wallet(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    sub = args["sub"].casefold()
    rest = args["rest"].split()

    if not sub:
        return await balances(ctx)

    if sub == "send":
        if len(rest) < 3:
            raise MalformedCommand(SEND_USAGE)
        return await ctx.transfers.request_transfer(rest[0], rest[1], " ".join(rest[2:]))

    if sub in {"hide", "show"} and not rest:
        return _set_hide_zero(ctx, sub == "hide")

    if sub == "tokens" and not rest:
        return await registered_token_lines(ctx.aggregator)

    if sub == "register" and len(rest) == 1:
        unwrap(await ctx.actor.register_token(rest[0]))
        return [f"Registered token {rest[0]}."]

    if sub == "unregister" and len(rest) == 1:
        unwrap(await ctx.actor.unregister_token(rest[0]))
        return [f"Unregistered token {rest[0]}."]

    if sub == "refresh" and len(rest) <= 1:
        canister_id = rest[0] if rest else None
        unwrap(await ctx.actor.refresh_token_metadata(canister_id))
        return [f"Refreshed metadata for {canister_id}." if canister_id else "Refreshed token metadata."]

    raise MalformedCommand(WALLET_USAGE)
