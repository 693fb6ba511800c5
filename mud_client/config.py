from __future__ import annotations

import os
from dataclasses import dataclass

from mud_client.accounts import is_valid_principal


@dataclass(frozen=True, slots=True)
class ClientSettings:
    backend_url: str
    ledger_url: str
    principal: str
    # The game backend's own principal; room and item accounts are its subaccounts.
    backend_canister_id: str
    message_poll_seconds: float = 1.0
    room_poll_seconds: float = 5.0
    request_timeout_seconds: float = 10.0


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise RuntimeError(f"{name} must be positive")
    return value


def settings_from_env() -> ClientSettings:
    principal = os.environ.get("MUD_PRINCIPAL", "").strip()
    if not principal:
        raise RuntimeError("Set MUD_PRINCIPAL to the principal this client plays as")

    backend_canister_id = os.environ.get("MUD_BACKEND_CANISTER_ID", "").strip()
    if not backend_canister_id:
        raise RuntimeError("Set MUD_BACKEND_CANISTER_ID to the game backend's principal")
    if not is_valid_principal(backend_canister_id):
        raise RuntimeError(f"MUD_BACKEND_CANISTER_ID is not a valid principal: {backend_canister_id!r}")

    backend_url = os.environ.get("MUD_BACKEND_URL", "http://127.0.0.1:4943")
    return ClientSettings(
        backend_url=backend_url,
        ledger_url=os.environ.get("MUD_LEDGER_URL", backend_url),
        principal=principal,
        backend_canister_id=backend_canister_id,
        message_poll_seconds=_float_env("MUD_MESSAGE_POLL_SECONDS", 1.0),
        room_poll_seconds=_float_env("MUD_ROOM_POLL_SECONDS", 5.0),
        request_timeout_seconds=_float_env("MUD_REQUEST_TIMEOUT_SECONDS", 10.0),
    )
