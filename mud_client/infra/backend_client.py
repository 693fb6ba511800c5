from __future__ import annotations

from typing import Any, Callable, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from mud_client.accounts import Account
from mud_client.api.models import Item, ItemType, Message, Player, RegisteredToken, Room, Stats
from mud_client.core.errors import RemoteProtocolError, TransportError
from mud_client.core.result import Err, Ok, Result, result_from_wire
from mud_client.remote import TransferArgs
from mud_client.tokens import describe_transfer_error


T = TypeVar("T")

PRINCIPAL_HEADER = "X-Principal"

_MESSAGES = TypeAdapter(list[Message])
_PLAYERS = TypeAdapter(list[Player])
_ITEMS = TypeAdapter(list[Item])
_ITEM_TYPES = TypeAdapter(list[ItemType])
_ITEM_IDS = TypeAdapter(list[int])
_REGISTERED_TOKENS = TypeAdapter(list[RegisteredToken])


def _unit(_: Any) -> None:
    return None


async def _post_json(client: httpx.AsyncClient, url: str, *, payload: dict[str, Any], principal: str, what: str) -> Any:
    try:
        resp = await client.post(url, json=payload, headers={PRINCIPAL_HEADER: principal})
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise TransportError(f"{what} failed with status {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise TransportError(f"{what} failed: {e}") from e

    try:
        return resp.json()
    except ValueError as e:
        raise RemoteProtocolError(f"{what} returned invalid JSON") from e


class HttpLedgerActor:
    """ICRC-1 ledger reached through a JSON gateway at `{ledger_url}/{canister_id}/...`."""

    def __init__(self, *, client: httpx.AsyncClient, ledger_url: str, canister_id: str, principal: str) -> None:
        self._client = client
        self._base = f"{ledger_url.rstrip('/')}/{canister_id}"
        self._principal = principal
        self.canister_id = canister_id

    async def balance_of(self, account: Account) -> int:
        raw = await _post_json(
            self._client,
            f"{self._base}/icrc1_balance_of",
            payload=account.to_wire(),
            principal=self._principal,
            what=f"icrc1_balance_of on {self.canister_id}",
        )
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise RemoteProtocolError(f"Unexpected balance from {self.canister_id}: {raw!r}")
        return raw

    async def transfer(self, args: TransferArgs) -> Result[int]:
        raw = await _post_json(
            self._client,
            f"{self._base}/icrc1_transfer",
            payload={
                "to": args.to.to_wire(),
                "amount": args.amount,
                "fee": args.fee,
                "memo": list(args.memo) if args.memo is not None else None,
                "from_subaccount": list(args.from_subaccount) if args.from_subaccount is not None else None,
                "created_at_time": args.created_at_time,
            },
            principal=self._principal,
            what=f"icrc1_transfer on {self.canister_id}",
        )
        # Ledgers tag their variant as Ok/Err rather than ok/err.
        if isinstance(raw, dict) and len(raw) == 1:
            if "Ok" in raw and isinstance(raw["Ok"], int):
                return Ok(raw["Ok"])
            if "Err" in raw:
                return Err(describe_transfer_error(raw["Err"]))
        raise RemoteProtocolError(f"Malformed transfer result from {self.canister_id}: {raw!r}")


class HttpRemoteActor:
    """RemoteActor over a JSON-over-HTTP gateway.

    Each method is `POST {base_url}/call/{method}` with keyword arguments as the JSON body.
    The caller is identified by the `X-Principal` header; signing is the gateway's job.
    """

    def __init__(
        self,
        *,
        base_url: str,
        principal: str,
        ledger_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._ledger_url = (ledger_url or base_url).rstrip("/")
        self._principal = principal
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ledgers: dict[str, HttpLedgerActor] = {}

    @property
    def principal(self) -> str:
        return self._principal

    async def __aenter__(self) -> "HttpRemoteActor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _call(self, method: str, **args: Any) -> Any:
        return await _post_json(
            self._client,
            f"{self._base_url}/call/{method}",
            payload=args,
            principal=self._principal,
            what=method,
        )

    async def _result(self, method: str, parse: Callable[[Any], T] | None = None, **args: Any) -> Result[T]:
        raw = await self._call(method, **args)
        try:
            return result_from_wire(raw, parse)
        except ValidationError as e:
            raise RemoteProtocolError(f"{method} returned an unexpected payload: {e}") from e

    async def _value(self, method: str, parse: Callable[[Any], T], **args: Any) -> T:
        raw = await self._call(method, **args)
        try:
            return parse(raw)
        except ValidationError as e:
            raise RemoteProtocolError(f"{method} returned an unexpected payload: {e}") from e

    # ---- messages / rooms ----

    async def get_messages(self, after_id: int | None) -> list[Message]:
        return await self._value("getMessages", _MESSAGES.validate_python, after_id=after_id)

    async def get_current_room(self) -> Result[Room]:
        return await self._result("getCurrentRoom", Room.model_validate)

    async def get_players_in_room(self, room_id: int) -> Result[list[Player]]:
        return await self._result("getPlayersInRoom", _PLAYERS.validate_python, room_id=room_id)

    async def use_exit(self, exit_id: str) -> Result[None]:
        return await self._result("useExit", _unit, exit_id=exit_id)

    # ---- social / combat ----

    async def say(self, text: str) -> Result[None]:
        return await self._result("say", _unit, text=text)

    async def whisper(self, player_name: str, text: str) -> Result[None]:
        return await self._result("whisper", _unit, player_name=player_name, text=text)

    async def attack(self, player_name: str) -> Result[None]:
        return await self._result("attack", _unit, player_name=player_name)

    async def respawn(self) -> Result[None]:
        return await self._result("respawn", _unit)

    async def create_character(self) -> Result[None]:
        return await self._result("createCharacter", _unit)

    async def get_stats(self) -> Result[Stats]:
        return await self._result("getStats", Stats.model_validate)

    # ---- items ----

    async def get_items(self) -> Result[list[Item]]:
        return await self._result("getItems", _ITEMS.validate_python)

    async def get_room_items(self, room_id: int) -> Result[list[Item]]:
        return await self._result("getRoomItems", _ITEMS.validate_python, room_id=room_id)

    async def get_item(self, item_id: int) -> Result[Item]:
        return await self._result("getItem", Item.model_validate, item_id=item_id)

    async def get_item_type(self, type_id: int) -> Result[ItemType]:
        return await self._result("getItemType", ItemType.model_validate, type_id=type_id)

    async def get_item_types(self) -> list[ItemType]:
        return await self._value("getItemTypes", _ITEM_TYPES.validate_python)

    async def get_container_contents(self, item_id: int) -> Result[list[int]]:
        return await self._result("getContainerContents", _ITEM_IDS.validate_python, item_id=item_id)

    async def toggle_container(self, item_id: int) -> Result[bool]:
        return await self._result("toggleContainer", bool, item_id=item_id)

    async def transfer_item(self, item_id: int, to: Account, count: int | None = None) -> Result[None]:
        return await self._result("transferItem", _unit, item_id=item_id, to=to.to_wire(), count=count)

    # ---- names ----

    async def register_player_name(self, name: str) -> Result[str]:
        return await self._result("registerPlayerName", str, name=name)

    async def unregister_player_name(self) -> Result[str]:
        return await self._result("unregisterPlayerName", str)

    async def get_player_name(self, principal: str) -> str | None:
        raw = await self._call("getPlayerName", principal=principal)
        return raw if isinstance(raw, str) and raw else None

    async def get_principal_by_name(self, name: str) -> str | None:
        raw = await self._call("getPrincipalByName", name=name)
        return raw if isinstance(raw, str) and raw else None

    # ---- world building ----

    async def create_room(self, name: str, description: str) -> Result[int]:
        return await self._result("createRoom", int, name=name, description=description)

    async def add_exit(
        self,
        room_id: int,
        exit_id: str,
        name: str,
        description: str,
        target_room_id: int,
        direction: str | None,
    ) -> Result[None]:
        return await self._result(
            "addExit",
            _unit,
            room_id=room_id,
            exit_id=exit_id,
            name=name,
            description=description,
            target_room_id=target_room_id,
            direction=direction,
        )

    async def create_item_type(
        self,
        name: str,
        description: str,
        is_container: bool,
        capacity: int | None,
        stack_max: int,
    ) -> Result[int]:
        return await self._result(
            "createItemType",
            int,
            name=name,
            description=description,
            is_container=is_container,
            capacity=capacity,
            stack_max=stack_max,
        )

    async def create_item(self, type_id: int, count: int) -> Result[int]:
        return await self._result("createItem", int, type_id=type_id, count=count)

    # ---- tokens ----

    async def get_registered_tokens(self) -> Result[list[RegisteredToken]]:
        return await self._result("getRegisteredTokens", _REGISTERED_TOKENS.validate_python)

    async def refresh_token_metadata(self, canister_id: str | None = None) -> Result[None]:
        return await self._result("refreshTokenMetadata", _unit, canister_id=canister_id)

    async def register_token(self, canister_id: str) -> Result[None]:
        return await self._result("registerToken", _unit, canister_id=canister_id)

    async def unregister_token(self, canister_id: str) -> Result[None]:
        return await self._result("unregisterToken", _unit, canister_id=canister_id)

    async def notify_token_transfer(
        self,
        *,
        token_symbol: str,
        amount: int,
        sender_name: str,
        recipient: str,
        tx_id: int,
    ) -> Result[None]:
        return await self._result(
            "notifyTokenTransfer",
            _unit,
            token_symbol=token_symbol,
            amount=amount,
            sender_name=sender_name,
            recipient=recipient,
            tx_id=tx_id,
        )

    def ledger(self, canister_id: str) -> HttpLedgerActor:
        actor = self._ledgers.get(canister_id)
        if actor is None:
            actor = HttpLedgerActor(
                client=self._client,
                ledger_url=self._ledger_url,
                canister_id=canister_id,
                principal=self._principal,
            )
            self._ledgers[canister_id] = actor
        return actor
