from __future__ import annotations

import logging
from collections.abc import Sequence

from mud_client.api.models import Message
from mud_client.core.state import EventLog
from mud_client.remote import RemoteActor

logger = logging.getLogger(__name__)


class MessageSynchronizer:
    """Tails the backend's append-only message stream into the event log.

    `cursor` is the highest message id already shown. It only moves up, and it is
    re-read when a response arrives (not when the request was sent), so overlapping
    polls and replayed batches are no-ops.
    """

    def __init__(self, *, actor: RemoteActor, log: EventLog) -> None:
        self._actor = actor
        self._log = log
        self.cursor: int | None = None

    def apply(self, messages: Sequence[Message]) -> list[Message]:
        """Merge one response batch; returns the messages actually appended."""

        fresh: list[Message] = []
        for msg in sorted(messages, key=lambda m: m.id):
            if self.cursor is not None and msg.id <= self.cursor:
                continue
            if fresh and msg.id == fresh[-1].id:
                continue
            fresh.append(msg)

        if not fresh:
            return []

        self._log.append(m.content for m in fresh)
        newest = fresh[-1].id
        if self.cursor is None or newest > self.cursor:
            self.cursor = newest
        return fresh

    async def poll(self) -> list[Message]:
        try:
            messages = await self._actor.get_messages(self.cursor)
        except Exception as e:
            logger.warning("Error fetching messages: %s", e)
            return []
        return self.apply(messages)
