from __future__ import annotations

import logging
from collections.abc import Awaitable

from mud_client.commands.context import CommandContext
from mud_client.commands.grammar import UNKNOWN_COMMAND, CommandSpec, lookup
from mud_client.commands.parser import Command, parse_command
from mud_client.core.errors import InsufficientFunds, MalformedCommand, MudClientError, UnresolvedReference
from mud_client.core.state import EventLog

logger = logging.getLogger(__name__)

CONFIRMATION_ANSWERS = frozenset({"yes", "no"})


def render_error(exc: Exception) -> list[str]:
    """Turn any handler failure into the log line the player sees."""

    if isinstance(exc, MalformedCommand):
        return [exc.usage]
    if isinstance(exc, (UnresolvedReference, InsufficientFunds)):
        return [str(exc)]
    message = str(exc).strip() or "Unknown error"
    return [f"Error: {message}"]


class CommandInterpreter:
    """Entry point for everything the player types.

    Output lines are appended to the event log and also returned.
    """

    def __init__(self, *, ctx: CommandContext, log: EventLog) -> None:
        self._ctx = ctx
        self._log = log

    @property
    def context(self) -> CommandContext:
        return self._ctx

    async def interpret(self, raw_text: str) -> list[str]:
        text = raw_text.strip()
        if not text:
            return []

        # A pending transfer claims bare yes/no before anything else sees it.
        if self._ctx.transfers.awaiting_confirmation and text.casefold() in CONFIRMATION_ANSWERS:
            lines = await self._guarded("confirm", self._ctx.transfers.confirm(text))
        else:
            command = parse_command(text)
            lines = await self.dispatch(command) if command is not None else []

        self._log.append(lines)
        return lines

    async def dispatch(self, command: Command) -> list[str]:
        spec = lookup(command.verb)
        if spec is None:
            return [UNKNOWN_COMMAND]
        try:
            args = spec.parse_args(command.rest)
        except MalformedCommand as e:
            return [e.usage]
        return await self._guarded(spec.name, self._run(spec, args))

    async def _run(self, spec: CommandSpec, args: dict[str, str]) -> list[str]:
        return await spec.handler(self._ctx, args)

    async def _guarded(self, name: str, call: Awaitable[list[str]]) -> list[str]:
        try:
            return await call
        except MudClientError as e:
            logger.info("Command %s failed: %s", name, e)
            return render_error(e)
        except Exception as e:
            logger.warning("Command %s raised", name, exc_info=True)
            return render_error(e)
