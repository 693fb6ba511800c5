from __future__ import annotations

from pydantic import BaseModel, Field


class Exit(BaseModel):
    name: str
    description: str = ""
    # Compass direction, if the builder gave the exit one.
    direction: str | None = None


class Room(BaseModel):
    id: int
    name: str
    description: str = ""

    # Ordered (exit_id, exit) pairs, as listed by the backend.
    exits: list[tuple[str, Exit]] = Field(default_factory=list)


class Player(BaseModel):
    principal: str
    name: str


class ItemType(BaseModel):
    id: int
    name: str
    description: str = ""
    is_container: bool = False
    capacity: int | None = None
    stack_max: int = 1


class Item(BaseModel):
    id: int
    item_type: ItemType
    count: int = 1

    # Only meaningful for containers.
    is_open: bool = False

    @property
    def name(self) -> str:
        return self.item_type.name

    @property
    def is_container(self) -> bool:
        return self.item_type.is_container


class Message(BaseModel):
    id: int
    content: str


class BaseStats(BaseModel):
    level: int
    max_hp: int
    max_mp: int


class DynamicStats(BaseModel):
    hp: int
    mp: int
    xp: int


class Stats(BaseModel):
    base: BaseStats
    dynamic: DynamicStats


class TokenDescriptor(BaseModel):
    symbol: str
    name: str
    ledger_id: str
    decimals: int = Field(..., ge=0)
    fee: int = Field(..., ge=0)


class RegisteredToken(BaseModel):
    canister_id: str

    # Filled once the backend has decoded the ledger's ICRC-1 metadata.
    metadata: TokenDescriptor | None = None


class CommandRequest(BaseModel):
    text: str = Field(..., max_length=4000)


class CommandResponse(BaseModel):
    lines: list[str]


class LogResponse(BaseModel):
    lines: list[str]
    next: int


class RoomResponse(BaseModel):
    room: Room
    players: list[Player]
