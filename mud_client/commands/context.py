from __future__ import annotations

from dataclasses import dataclass

import redis

from mud_client.accounts import Account
from mud_client.api.models import Room
from mud_client.core.state import RoomState
from mud_client.remote import RemoteActor
from mud_client.sync.room import RoomSynchronizer
from mud_client.transfer import TransferWorkflow
from mud_client.wallet import BalanceAggregator


@dataclass(slots=True)
class CommandContext:
    """What handlers may touch. Room state is read-only here; RoomSynchronizer owns it."""

    actor: RemoteActor
    room_state: RoomState
    room_sync: RoomSynchronizer
    transfers: TransferWorkflow
    aggregator: BalanceAggregator
    account: Account
    player_name: str
    backend_canister_id: str
    r: redis.Redis

    @property
    def room(self) -> Room | None:
        return self.room_state.room

    @property
    def room_id(self) -> int | None:
        room = self.room_state.room
        return room.id if room is not None else None
