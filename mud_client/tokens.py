from __future__ import annotations

import re
from typing import Any

from mud_client.api.models import TokenDescriptor

# Built-in ledgers; always queried before anything from the dynamic registry.
STATIC_TOKENS: dict[str, TokenDescriptor] = {
    "ICP": TokenDescriptor(
        symbol="ICP",
        name="Internet Computer Protocol",
        ledger_id="ryjl3-tyaaa-aaaaa-aaaba-cai",
        decimals=8,
        fee=10_000,
    ),
    "DKP": TokenDescriptor(
        symbol="DKP",
        name="Dragginz",
        ledger_id="zfcdd-tqaaa-aaaaq-aaaga-cai",
        decimals=8,
        fee=10_000,
    ),
    "SNEED": TokenDescriptor(
        symbol="SNEED",
        name="Sneed",
        ledger_id="hvgxa-wqaaa-aaaaq-aacia-cai",
        decimals=8,
        fee=10_000,
    ),
}

_AMOUNT_RE = re.compile(r"(?P<int>\d*)(?:\.(?P<frac>\d*))?")


def format_token_amount(amount: int, decimals: int) -> str:
    """Render a fixed-point ledger amount for humans.

    >>> format_token_amount(123_450_000, 8)
    '1.2345'
    >>> format_token_amount(1_234_500_000_000, 8)
    '12,345'
    """

    if not amount:
        return "0"

    sign = "-" if amount < 0 else ""
    digits = str(abs(amount))
    if decimals <= 0:
        return f"{sign}{int(digits):,}"

    integer_part = digits[:-decimals] or "0"
    fractional_part = digits[-decimals:].rjust(decimals, "0").rstrip("0")

    formatted = f"{sign}{int(integer_part):,}"
    return f"{formatted}.{fractional_part}" if fractional_part else formatted


def parse_token_amount(text: str, decimals: int) -> int:
    """Parse a human amount ("1.5", "1,000", ".25") into ledger units.

    Raises ValueError for malformed input or more fractional digits than the token has.
    """

    cleaned = text.strip().replace(",", "")
    m = _AMOUNT_RE.fullmatch(cleaned)
    if m is None or not (m.group("int") or m.group("frac")):
        raise ValueError(f"Invalid amount: '{text.strip()}'")

    integer_part = m.group("int") or "0"
    fractional_part = (m.group("frac") or "").rstrip("0")
    if len(fractional_part) > decimals:
        raise ValueError(f"Too many decimal places (max {decimals})")

    return int(integer_part + fractional_part.ljust(decimals, "0"))


def describe_transfer_error(err: Any) -> str:
    """Map an ICRC-1 TransferError variant to the text shown to the player."""

    if isinstance(err, str):
        return err
    if not isinstance(err, dict) or len(err) != 1:
        return "Transfer failed"

    ((tag, detail),) = err.items()
    if tag == "InsufficientFunds":
        return "Insufficient funds"
    if tag == "BadFee":
        return "Invalid fee"
    if tag == "TemporarilyUnavailable":
        return "Service temporarily unavailable"
    if tag == "GenericError" and isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    return "Transfer failed"
