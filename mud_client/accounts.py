from __future__ import annotations

import base64
import binascii
import zlib
from dataclasses import dataclass

SUBACCOUNT_SIZE = 32

# Second byte of a backend subaccount says what kind of entity owns it.
ROOM_SUBACCOUNT_KIND = 1
ITEM_SUBACCOUNT_KIND = 2

_MAX_PRINCIPAL_BYTES = 29


@dataclass(frozen=True, slots=True)
class Account:
    """ICRC-1 style account: a principal plus an optional 32-byte subaccount."""

    owner: str
    subaccount: bytes | None = None

    def to_wire(self) -> dict[str, object]:
        return {
            "owner": self.owner,
            "subaccount": list(self.subaccount) if self.subaccount is not None else None,
        }


def decode_principal(text: str) -> bytes:
    """Decode textual principal form (dash-grouped base32 with a CRC32 prefix).

    Raises ValueError for anything that is not a canonical principal.
    """

    s = text.strip()
    if not s or s != s.lower():
        raise ValueError(f"Invalid principal: {text!r}")

    groups = s.split("-")
    if any(len(g) != 5 for g in groups[:-1]) or not 0 < len(groups[-1]) <= 5:
        raise ValueError(f"Invalid principal: {text!r}")

    raw = "".join(groups).upper()
    try:
        data = base64.b32decode(raw + "=" * (-len(raw) % 8))
    except binascii.Error as e:
        raise ValueError(f"Invalid principal: {text!r}") from e

    if len(data) < 4 or len(data) - 4 > _MAX_PRINCIPAL_BYTES:
        raise ValueError(f"Invalid principal: {text!r}")

    checksum, body = data[:4], data[4:]
    if zlib.crc32(body).to_bytes(4, "big") != checksum:
        raise ValueError(f"Invalid principal checksum: {text!r}")
    return body


def is_valid_principal(text: str) -> bool:
    try:
        decode_principal(text)
    except ValueError:
        return False
    return True


def _entity_subaccount(kind: int, entity_id: int) -> bytes:
    if entity_id < 0:
        raise ValueError("entity id must be non-negative")
    out = bytearray(SUBACCOUNT_SIZE)
    out[0] = SUBACCOUNT_SIZE
    out[1] = kind
    pos = 2
    n = entity_id
    while n > 0:
        if pos >= SUBACCOUNT_SIZE:
            raise ValueError("entity id too large for a subaccount")
        out[pos] = n & 0xFF
        n >>= 8
        pos += 1
    return bytes(out)


def room_subaccount(room_id: int) -> bytes:
    return _entity_subaccount(ROOM_SUBACCOUNT_KIND, room_id)


def item_subaccount(item_id: int) -> bytes:
    return _entity_subaccount(ITEM_SUBACCOUNT_KIND, item_id)


def room_account(*, backend_canister_id: str, room_id: int) -> Account:
    """Account holding the items lying on a room's floor."""

    return Account(owner=backend_canister_id, subaccount=room_subaccount(room_id))


def item_account(*, backend_canister_id: str, item_id: int) -> Account:
    """Account holding the contents of a container item."""

    return Account(owner=backend_canister_id, subaccount=item_subaccount(item_id))
