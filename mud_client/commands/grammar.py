from __future__ import annotations

import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from mud_client.commands import builder, items, wallet, world
from mud_client.commands.context import CommandContext
from mud_client.core.errors import MalformedCommand

Handler = Callable[[CommandContext, dict[str, str]], Awaitable[list[str]]]

UNKNOWN_COMMAND = "Unknown command. Type /help for available commands."


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """One verb: its aliases, the full-match argument pattern and the usage line."""

    name: str
    pattern: re.Pattern[str]
    usage: str
    summary: str
    handler: Handler
    aliases: tuple[str, ...] = ()

    @property
    def verbs(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)

    def parse_args(self, rest: str) -> dict[str, str]:
        m = self.pattern.fullmatch(rest)
        if m is None:
            raise MalformedCommand(self.usage)
        return m.groupdict(default="")


def _spec(
    name: str,
    pattern: str,
    usage: str,
    summary: str,
    handler: Handler,
    *aliases: str,
) -> CommandSpec:
    return CommandSpec(
        name=name,
        pattern=re.compile(pattern, re.IGNORECASE | re.DOTALL),
        usage=usage,
        summary=summary,
        handler=handler,
        aliases=aliases,
    )


_NO_ARGS = r""
_ITEM_WITH_COUNT = r"(?P<item>.+?)(?:\s+(?P<count>\d+))?"


async def help_command(ctx: CommandContext, args: dict[str, str]) -> list[str]:
    topic = args["topic"].strip().lstrip("/").casefold()
    if topic:
        spec = lookup(topic)
        if spec is None:
            return [UNKNOWN_COMMAND]
        return [spec.usage, f"  {spec.summary}"]

    lines = ["Available commands:"]
    for spec in COMMANDS:
        verbs = ", ".join(f"/{v}" for v in spec.verbs)
        lines.append(f"  {verbs} - {spec.summary}")
    lines.append("Type an exit name on its own to walk through it.")
    return lines


COMMANDS: tuple[CommandSpec, ...] = (
    _spec("say", r"(?P<text>.+)", "Usage: /say <message>", "Say something to everyone in the room", world.say, "s"),
    _spec(
        "whisper",
        r"(?P<player>\S+)\s+(?P<text>.+)",
        "Usage: /whisper <player> <message>",
        "Whisper to one player",
        world.whisper,
        "w",
    ),
    _spec("go", r"(?P<exit>.+)", "Usage: /go <exit>", "Walk through an exit", world.go, "g"),
    _spec("look", r"(?P<target>.*)", "Usage: /look [player|item]", "Look at the room, a player or an item", world.look, "l"),
    _spec("inventory", _NO_ARGS, "Usage: /inventory", "List what you are carrying", items.inventory, "i", "inv"),
    _spec("pick", _ITEM_WITH_COUNT, "Usage: /pick <item> [count]", "Pick up an item", items.pick, "take", "get"),
    _spec("drop", _ITEM_WITH_COUNT, "Usage: /drop <item> [count]", "Drop an item in this room", items.drop),
    _spec(
        "give",
        r"(?P<item>.+?)\s+(?:to\s+)?(?P<player>\S+)",
        "Usage: /give <item> [to] <player>",
        "Give an item to a player in this room",
        items.give,
    ),
    _spec("open", r"(?P<item>.+)", "Usage: /open <container>", "Open a container", items.open_container),
    _spec("close", r"(?P<item>.+)", "Usage: /close <container>", "Close a container", items.close_container),
    _spec(
        "put",
        r"(?P<item>.+?)\s+(?:in|into)\s+(?P<container>.+)",
        "Usage: /put <item> in <container>",
        "Put an item into a container",
        items.put,
    ),
    _spec("attack", r"(?P<player>\S+)", "Usage: /attack <player>", "Attack a player", world.attack),
    _spec("respawn", _NO_ARGS, "Usage: /respawn", "Come back to life", world.respawn),
    _spec("stats", _NO_ARGS, "Usage: /stats", "Show your character stats", world.stats),
    _spec("create", _NO_ARGS, "Usage: /create", "Create your character", world.create_character),
    _spec(
        "create_room",
        r"(?P<name>[^|]+?)\s*\|\s*(?P<description>[^|]+)",
        "Usage: /create_room <name> | <description>",
        "Create a new room",
        builder.create_room,
    ),
    _spec(
        "create_exit",
        r"(?P<exit_id>\S+)\s+(?P<target>\d+)\s+(?P<name>[^|]+?)\s*\|\s*(?P<description>[^|]+?)(?:\s*\|\s*(?P<direction>[a-z]+))?",
        "Usage: /create_exit <exit_id> <target_room_id> <name> | <description> [| <direction>]",
        "Add an exit from the current room",
        builder.create_exit,
    ),
    _spec(
        "create_item_type",
        r"(?P<name>[^|]+?)\s*\|\s*(?P<description>[^|]+?)(?:\s*\|\s*(?P<options>[^|]+))?",
        builder.CREATE_ITEM_TYPE_USAGE,
        "Define a new item type",
        builder.create_item_type,
    ),
    _spec(
        "create_item",
        r"(?P<type>.+?)(?:\s+(?P<count>\d+))?",
        "Usage: /create_item <item_type> [count]",
        "Create items of a type",
        builder.create_item,
    ),
    _spec(
        "wallet",
        r"(?:(?P<sub>\w+)(?:\s+(?P<rest>.*))?)?",
        wallet.WALLET_USAGE,
        "Show balances and manage tokens",
        wallet.wallet,
    ),
    _spec(
        "send",
        r"(?P<amount>\S+)\s+(?P<token>\S+)\s+(?P<recipient>.+)",
        wallet.SEND_USAGE,
        "Send tokens to a player or principal",
        wallet.send,
    ),
    _spec("whois", r"(?P<principal>\S+)", "Usage: /whois <principal>", "Look up a player's name", world.whois),
    _spec("help", r"(?P<topic>.*)", "Usage: /help [command]", "Show this help", help_command, "?"),
)

_BY_VERB: dict[str, CommandSpec] = {verb: spec for spec in COMMANDS for verb in spec.verbs}


def lookup(verb: str) -> CommandSpec | None:
    return _BY_VERB.get(verb.casefold())
