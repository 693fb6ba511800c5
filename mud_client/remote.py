from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from mud_client.accounts import Account
from mud_client.api.models import (
    Item,
    ItemType,
    Message,
    Player,
    RegisteredToken,
    Room,
    Stats,
)
from mud_client.core.result import Result


@dataclass(frozen=True, slots=True)
class TransferArgs:
    to: Account
    amount: int
    fee: int | None = None
    memo: bytes | None = None
    from_subaccount: bytes | None = None
    created_at_time: int | None = None


class LedgerActor(Protocol):
    """One token ledger (ICRC-1 subset)."""

    async def balance_of(self, account: Account) -> int:  # pragma: no cover
        ...

    async def transfer(self, args: TransferArgs) -> Result[int]:  # pragma: no cover
        ...


class RemoteActor(Protocol):
    """Everything the client core asks of the game backend.

    Calls that can be refused by game rules return Ok/Err. Transport failures raise
    `TransportError` instead.
    """

    async def get_messages(self, after_id: int | None) -> list[Message]:  # pragma: no cover
        ...

    async def get_current_room(self) -> Result[Room]:  # pragma: no cover
        ...

    async def get_players_in_room(self, room_id: int) -> Result[list[Player]]:  # pragma: no cover
        ...

    async def use_exit(self, exit_id: str) -> Result[None]:  # pragma: no cover
        ...

    async def say(self, text: str) -> Result[None]:  # pragma: no cover
        ...

    async def whisper(self, player_name: str, text: str) -> Result[None]:  # pragma: no cover
        ...

    async def attack(self, player_name: str) -> Result[None]:  # pragma: no cover
        ...

    async def respawn(self) -> Result[None]:  # pragma: no cover
        ...

    async def create_character(self) -> Result[None]:  # pragma: no cover
        ...

    async def get_stats(self) -> Result[Stats]:  # pragma: no cover
        ...

    async def get_items(self) -> Result[list[Item]]:  # pragma: no cover
        ...

    async def get_room_items(self, room_id: int) -> Result[list[Item]]:  # pragma: no cover
        ...

    async def get_item(self, item_id: int) -> Result[Item]:  # pragma: no cover
        ...

    async def get_item_type(self, type_id: int) -> Result[ItemType]:  # pragma: no cover
        ...

    async def get_item_types(self) -> list[ItemType]:  # pragma: no cover
        ...

    async def get_container_contents(self, item_id: int) -> Result[list[int]]:  # pragma: no cover
        ...

    async def toggle_container(self, item_id: int) -> Result[bool]:  # pragma: no cover
        ...

    async def transfer_item(self, item_id: int, to: Account, count: int | None = None) -> Result[None]:  # pragma: no cover
        ...

    async def register_player_name(self, name: str) -> Result[str]:  # pragma: no cover
        ...

    async def unregister_player_name(self) -> Result[str]:  # pragma: no cover
        ...

    async def get_player_name(self, principal: str) -> str | None:  # pragma: no cover
        ...

    async def get_principal_by_name(self, name: str) -> str | None:  # pragma: no cover
        ...

    async def create_room(self, name: str, description: str) -> Result[int]:  # pragma: no cover
        ...

    async def add_exit(
        self,
        room_id: int,
        exit_id: str,
        name: str,
        description: str,
        target_room_id: int,
        direction: str | None,
    ) -> Result[None]:  # pragma: no cover
        ...

    async def create_item_type(
        self,
        name: str,
        description: str,
        is_container: bool,
        capacity: int | None,
        stack_max: int,
    ) -> Result[int]:  # pragma: no cover
        ...

    async def create_item(self, type_id: int, count: int) -> Result[int]:  # pragma: no cover
        ...

    async def get_registered_tokens(self) -> Result[list[RegisteredToken]]:  # pragma: no cover
        ...

    async def refresh_token_metadata(self, canister_id: str | None = None) -> Result[None]:  # pragma: no cover
        ...

    async def register_token(self, canister_id: str) -> Result[None]:  # pragma: no cover
        ...

    async def unregister_token(self, canister_id: str) -> Result[None]:  # pragma: no cover
        ...

    async def notify_token_transfer(
        self,
        *,
        token_symbol: str,
        amount: int,
        sender_name: str,
        recipient: str,
        tx_id: int,
    ) -> Result[None]:  # pragma: no cover
        ...

    def ledger(self, canister_id: str) -> LedgerActor:  # pragma: no cover
        ...
