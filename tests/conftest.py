from __future__ import annotations

from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import Any

import fakeredis
import pytest

from mud_client.accounts import Account
from mud_client.api.models import (
    Exit,
    Item,
    ItemType,
    Message,
    Player,
    RegisteredToken,
    Room,
    Stats,
)
from mud_client.core.result import Err, Ok, Result
from mud_client.remote import TransferArgs

ME = "ryjl3-tyaaa-aaaaa-aaaba-cai"
BACKEND = "aaaaa-aa"
BOB = "rrkah-fqaaa-aaaaa-aaaaq-cai"


@dataclass
class FakeLedger:
    """In-memory ICRC-1 ledger keyed by account owner."""

    balances: dict[str, int] = field(default_factory=dict)
    next_tx: int = 100
    fail_balance: Exception | None = None
    transfer_result: Result[int] | None = None
    transfers: list[TransferArgs] = field(default_factory=list)

    async def balance_of(self, account: Account) -> int:
        if self.fail_balance is not None:
            raise self.fail_balance
        return self.balances.get(account.owner, 0)

    async def transfer(self, args: TransferArgs) -> Result[int]:
        self.transfers.append(args)
        if self.transfer_result is not None:
            return self.transfer_result
        tx = self.next_tx
        self.next_tx += 1
        return Ok(tx)


def item_type(type_id: int, name: str, *, container: bool = False, description: str = "") -> ItemType:
    return ItemType(id=type_id, name=name, description=description, is_container=container, capacity=10 if container else None)


def make_item(item_id: int, name: str, *, container: bool = False, is_open: bool = False, count: int = 1) -> Item:
    return Item(id=item_id, item_type=item_type(item_id, name, container=container), count=count, is_open=is_open)


class FakeActor:
    """RemoteActor double holding a tiny world in memory and recording every call.

    Per-method failures are injected through `overrides`: a Result is returned as-is, an
    exception is raised, and a list queues one such answer per call.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.overrides: dict[str, Any] = {}

        self.messages: list[Message] = []
        self.room: Room | None = Room(
            id=1,
            name="Town Square",
            description="A busy square.",
            exits=[
                ("north_gate", Exit(name="North Gate", direction="north")),
                ("tavern", Exit(name="Tavern door", direction="east")),
            ],
        )
        self.players: dict[int, list[Player]] = {
            1: [Player(principal=ME, name="alice"), Player(principal=BOB, name="bob")],
        }
        self.inventory: list[Item] = []
        self.floor: dict[int, list[Item]] = {}
        self.items: dict[int, Item] = {}
        self.contents: dict[int, list[int]] = {}
        self.item_types: list[ItemType] = []
        self.names: dict[str, str] = {ME: "alice", BOB: "bob"}
        self.stats: Stats | None = None
        self.registered: list[RegisteredToken] = []
        self.ledgers: dict[str, FakeLedger] = {}

    def _record(self, name: str, *args: Any) -> Any:
        self.calls.append((name, args))
        override = self.overrides.get(name)
        if isinstance(override, Exception):
            raise override
        if isinstance(override, list):
            if not override:
                return None
            # A list is consumed one answer per call; queued exceptions are raised.
            override = override.pop(0)
            if isinstance(override, Exception):
                raise override
        return override

    def called(self, name: str) -> list[tuple[Any, ...]]:
        return [args for n, args in self.calls if n == name]

    def add_item(self, item: Item, *, where: str = "inventory", room_id: int = 1, container: int | None = None) -> Item:
        self.items[item.id] = item
        if where == "inventory":
            self.inventory.append(item)
        elif where == "floor":
            self.floor.setdefault(room_id, []).append(item)
        elif where == "container" and container is not None:
            self.contents.setdefault(container, []).append(item.id)
        return item

    def ledger(self, canister_id: str) -> FakeLedger:
        return self.ledgers.setdefault(canister_id, FakeLedger())

    async def get_messages(self, after_id: int | None) -> list[Message]:
        if (o := self._record("get_messages", after_id)) is not None:
            return o
        return [m for m in self.messages if after_id is None or m.id > after_id]

    async def get_current_room(self) -> Result[Room]:
        if (o := self._record("get_current_room")) is not None:
            return o
        return Ok(self.room) if self.room is not None else Err("You are nowhere")

    async def get_players_in_room(self, room_id: int) -> Result[list[Player]]:
        if (o := self._record("get_players_in_room", room_id)) is not None:
            return o
        return Ok(list(self.players.get(room_id, [])))

    async def use_exit(self, exit_id: str) -> Result[None]:
        return self._record("use_exit", exit_id) or Ok(None)

    async def say(self, text: str) -> Result[None]:
        return self._record("say", text) or Ok(None)

    async def whisper(self, player_name: str, text: str) -> Result[None]:
        return self._record("whisper", player_name, text) or Ok(None)

    async def attack(self, player_name: str) -> Result[None]:
        return self._record("attack", player_name) or Ok(None)

    async def respawn(self) -> Result[None]:
        return self._record("respawn") or Ok(None)

    async def create_character(self) -> Result[None]:
        return self._record("create_character") or Ok(None)

    async def get_stats(self) -> Result[Stats]:
        if (o := self._record("get_stats")) is not None:
            return o
        return Ok(self.stats) if self.stats is not None else Err("No character")

    async def get_items(self) -> Result[list[Item]]:
        return self._record("get_items") or Ok(list(self.inventory))

    async def get_room_items(self, room_id: int) -> Result[list[Item]]:
        return self._record("get_room_items", room_id) or Ok(list(self.floor.get(room_id, [])))

    async def get_item(self, item_id: int) -> Result[Item]:
        if (o := self._record("get_item", item_id)) is not None:
            return o
        item = self.items.get(item_id)
        return Ok(item) if item is not None else Err("Item not found")

    async def get_item_type(self, type_id: int) -> Result[ItemType]:
        self._record("get_item_type", type_id)
        found = next((t for t in self.item_types if t.id == type_id), None)
        return Ok(found) if found is not None else Err("Item type not found")

    async def get_item_types(self) -> list[ItemType]:
        self._record("get_item_types")
        return list(self.item_types)

    async def get_container_contents(self, item_id: int) -> Result[list[int]]:
        return self._record("get_container_contents", item_id) or Ok(list(self.contents.get(item_id, [])))

    async def toggle_container(self, item_id: int) -> Result[bool]:
        if (o := self._record("toggle_container", item_id)) is not None:
            return o
        item = self.items[item_id]
        updated = item.model_copy(update={"is_open": not item.is_open})
        self.items[item_id] = updated
        return Ok(updated.is_open)

    async def transfer_item(self, item_id: int, to: Account, count: int | None = None) -> Result[None]:
        return self._record("transfer_item", item_id, to, count) or Ok(None)

    async def register_player_name(self, name: str) -> Result[str]:
        return self._record("register_player_name", name) or Ok(name)

    async def unregister_player_name(self) -> Result[str]:
        return self._record("unregister_player_name") or Ok("")

    async def get_player_name(self, principal: str) -> str | None:
        self._record("get_player_name", principal)
        return self.names.get(principal)

    async def get_principal_by_name(self, name: str) -> str | None:
        self._record("get_principal_by_name", name)
        return next((p for p, n in self.names.items() if n == name), None)

    async def create_room(self, name: str, description: str) -> Result[int]:
        return self._record("create_room", name, description) or Ok(7)

    async def add_exit(
        self,
        room_id: int,
        exit_id: str,
        name: str,
        description: str,
        target_room_id: int,
        direction: str | None,
    ) -> Result[None]:
        return self._record("add_exit", room_id, exit_id, name, description, target_room_id, direction) or Ok(None)

    async def create_item_type(
        self,
        name: str,
        description: str,
        is_container: bool,
        capacity: int | None,
        stack_max: int,
    ) -> Result[int]:
        return self._record("create_item_type", name, description, is_container, capacity, stack_max) or Ok(3)

    async def create_item(self, type_id: int, count: int) -> Result[int]:
        return self._record("create_item", type_id, count) or Ok(42)

    async def get_registered_tokens(self) -> Result[list[RegisteredToken]]:
        return self._record("get_registered_tokens") or Ok(list(self.registered))

    async def refresh_token_metadata(self, canister_id: str | None = None) -> Result[None]:
        return self._record("refresh_token_metadata", canister_id) or Ok(None)

    async def register_token(self, canister_id: str) -> Result[None]:
        return self._record("register_token", canister_id) or Ok(None)

    async def unregister_token(self, canister_id: str) -> Result[None]:
        return self._record("unregister_token", canister_id) or Ok(None)

    async def notify_token_transfer(
        self,
        *,
        token_symbol: str,
        amount: int,
        sender_name: str,
        recipient: str,
        tx_id: int,
    ) -> Result[None]:
        return self._record("notify_token_transfer", token_symbol, amount, sender_name, recipient, tx_id) or Ok(None)


@pytest.fixture()
def actor() -> FakeActor:
    return FakeActor()


@pytest.fixture()
def r() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def make_session(actor: FakeActor, r: fakeredis.FakeRedis) -> Callable[..., Any]:
    """Build a GameSession around the fake actor without starting its pollers."""

    from mud_client.session import GameSession

    def _make(**kwargs: Any) -> GameSession:
        return GameSession(
            actor=actor,
            r=r,
            principal=kwargs.pop("principal", ME),
            player_name=kwargs.pop("player_name", "alice"),
            backend_canister_id=kwargs.pop("backend_canister_id", BACKEND),
            **kwargs,
        )

    return _make


@pytest.fixture(autouse=True)
def _reset_session_singleton() -> Generator[None, None, None]:
    from mud_client.runtime.singleton import reset_session_for_tests

    reset_session_for_tests()
    yield
    reset_session_for_tests()
