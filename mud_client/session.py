from __future__ import annotations

import logging

import redis

from mud_client.accounts import Account
from mud_client.commands.context import CommandContext
from mud_client.commands.interpreter import CommandInterpreter
from mud_client.config import ClientSettings
from mud_client.core.state import EventLog, RoomState
from mud_client.remote import RemoteActor
from mud_client.sync.messages import MessageSynchronizer
from mud_client.sync.room import RoomSynchronizer
from mud_client.sync.scheduler import PeriodicPoller
from mud_client.transfer import TransferWorkflow
from mud_client.wallet import BalanceAggregator

logger = logging.getLogger(__name__)


class GameSession:
    """One logged-in player: the shared log, the cached room, the pollers and the interpreter."""

    def __init__(
        self,
        *,
        actor: RemoteActor,
        r: redis.Redis,
        principal: str,
        player_name: str,
        backend_canister_id: str,
        message_poll_seconds: float = 1.0,
        room_poll_seconds: float = 5.0,
    ) -> None:
        self.actor = actor
        self.log = EventLog()
        self.room_state = RoomState()
        self.account = Account(owner=principal)

        self.messages = MessageSynchronizer(actor=actor, log=self.log)
        self.room_sync = RoomSynchronizer(actor=actor, state=self.room_state)
        self.aggregator = BalanceAggregator(actor=actor)
        self.transfers = TransferWorkflow(
            actor=actor,
            aggregator=self.aggregator,
            account=self.account,
            sender_name=player_name,
        )
        self.interpreter = CommandInterpreter(
            ctx=CommandContext(
                actor=actor,
                room_state=self.room_state,
                room_sync=self.room_sync,
                transfers=self.transfers,
                aggregator=self.aggregator,
                account=self.account,
                player_name=player_name,
                backend_canister_id=backend_canister_id,
                r=r,
            ),
            log=self.log,
        )

        self._pollers = (
            PeriodicPoller(name="messages", poll=self.messages.poll, interval=message_poll_seconds),
            PeriodicPoller(name="room", poll=self.room_sync.poll, interval=room_poll_seconds),
        )

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        *,
        actor: RemoteActor,
        r: redis.Redis,
        player_name: str,
    ) -> "GameSession":
        return cls(
            actor=actor,
            r=r,
            principal=settings.principal,
            player_name=player_name,
            backend_canister_id=settings.backend_canister_id,
            message_poll_seconds=settings.message_poll_seconds,
            room_poll_seconds=settings.room_poll_seconds,
        )

    @property
    def player_name(self) -> str:
        return self.interpreter.context.player_name

    @property
    def running(self) -> bool:
        return any(p.running for p in self._pollers)

    def start(self) -> None:
        """Start both pollers on the running loop. Idempotent."""

        for poller in self._pollers:
            poller.start()
        logger.info("Session for %s started", self.player_name)

    async def stop(self) -> None:
        for poller in self._pollers:
            await poller.stop()
        logger.info("Session for %s stopped", self.player_name)

    async def submit(self, text: str) -> list[str]:
        return await self.interpreter.interpret(text)
