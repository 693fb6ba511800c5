from __future__ import annotations

import logging

from mud_client.core.result import unwrap
from mud_client.core.state import RoomSnapshot, RoomState
from mud_client.remote import RemoteActor

logger = logging.getLogger(__name__)


class RoomSynchronizer:
    """Refreshes the cached room together with its roster.

    Both are fetched before either is stored; a failure at any step keeps the previous
    snapshot, stale but consistent.
    """

    def __init__(self, *, actor: RemoteActor, state: RoomState) -> None:
        self._actor = actor
        self._state = state

    async def poll(self) -> bool:
        try:
            room = unwrap(await self._actor.get_current_room())
            players = unwrap(await self._actor.get_players_in_room(room.id))
        except Exception as e:
            logger.warning("Error updating room: %s", e)
            return False

        self._state.replace(RoomSnapshot(room=room, players=tuple(players)))
        return True
