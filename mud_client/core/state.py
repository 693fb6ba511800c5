from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from mud_client.api.models import Player, Room


@dataclass(slots=True)
class EventLog:
    """Append-only list of display lines.

    Both the message poller and the command interpreter write here; nothing ever
    edits or removes a line.
    """

    lines: list[str] = field(default_factory=list)

    def append(self, lines: Iterable[str]) -> int:
        before = len(self.lines)
        self.lines.extend(lines)
        return len(self.lines) - before

    def since(self, index: int) -> list[str]:
        return self.lines[max(index, 0) :]

    def __len__(self) -> int:
        return len(self.lines)


@dataclass(frozen=True, slots=True)
class RoomSnapshot:
    room: Room
    players: tuple[Player, ...]


@dataclass(slots=True)
class RoomState:
    """Cached room and its roster, always swapped as one snapshot."""

    snapshot: RoomSnapshot | None = None

    def replace(self, snapshot: RoomSnapshot) -> None:
        self.snapshot = snapshot

    @property
    def room(self) -> Room | None:
        return self.snapshot.room if self.snapshot is not None else None

    @property
    def players(self) -> tuple[Player, ...]:
        return self.snapshot.players if self.snapshot is not None else ()
