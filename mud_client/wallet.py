from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass

from mud_client.accounts import Account
from mud_client.api.models import RegisteredToken, TokenDescriptor
from mud_client.core.errors import TransferRequestError
from mud_client.core.result import Err, Ok, unwrap
from mud_client.remote import RemoteActor
from mud_client.tokens import STATIC_TOKENS, format_token_amount

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TokenBalance:
    """One wallet row.

    Error rows have `balance=None`: their balance is unknown, not zero.
    """

    symbol: str
    name: str
    ledger_id: str
    decimals: int | None = None
    balance: int | None = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def formatted(self) -> str:
        if self.balance is None or self.decimals is None:
            return "?"
        return format_token_amount(self.balance, self.decimals)


class BalanceAggregator:
    def __init__(self, *, actor: RemoteActor, static_tokens: Mapping[str, TokenDescriptor] | None = None) -> None:
        self._actor = actor
        self._static = dict(static_tokens if static_tokens is not None else STATIC_TOKENS)

    @property
    def static_tokens(self) -> Mapping[str, TokenDescriptor]:
        return self._static

    async def fetch_registered_tokens(self) -> list[RegisteredToken]:
        """Fetch the dynamic token registry.

        A failed fetch (Err or raised) triggers exactly one metadata refresh and one
        retry. The retry's failure propagates.
        """

        try:
            result = await self._actor.get_registered_tokens()
        except Exception as e:
            result = Err(str(e) or type(e).__name__)
        if isinstance(result, Ok):
            return result.value

        logger.warning("Token registry fetch failed (%s); refreshing metadata and retrying", result.message)
        try:
            refreshed = await self._actor.refresh_token_metadata(None)
        except Exception as e:
            logger.warning("Token metadata refresh failed: %s", e)
        else:
            if isinstance(refreshed, Err):
                logger.warning("Token metadata refresh failed: %s", refreshed.message)

        return unwrap(await self._actor.get_registered_tokens())

    async def resolve_token(self, symbol: str) -> TokenDescriptor:
        """Find a token by symbol: static table first, then the registry."""

        wanted = symbol.strip().upper()
        static = self._static.get(wanted)
        if static is not None:
            return static

        try:
            registered = await self.fetch_registered_tokens()
        except Exception as e:
            raise TransferRequestError(f"Could not look up token '{symbol.strip()}': {e}") from e

        for entry in registered:
            if entry.metadata is not None and entry.metadata.symbol.upper() == wanted:
                return entry.metadata
        raise TransferRequestError(f"Unsupported token: {symbol.strip()}")

    async def _balance_row(self, token: TokenDescriptor, account: Account) -> TokenBalance:
        try:
            balance = await self._actor.ledger(token.ledger_id).balance_of(account)
        except Exception as e:
            logger.warning("Error fetching %s balance: %s", token.symbol, e)
            return TokenBalance(
                symbol=token.symbol,
                name=token.name,
                ledger_id=token.ledger_id,
                decimals=token.decimals,
                error=str(e) or type(e).__name__,
            )
        return TokenBalance(
            symbol=token.symbol,
            name=token.name,
            ledger_id=token.ledger_id,
            decimals=token.decimals,
            balance=balance,
        )

    async def _dynamic_rows(self, account: Account) -> list[TokenBalance]:
        try:
            registered = await self.fetch_registered_tokens()
        except Exception as e:
            logger.warning("Giving up on registered tokens: %s", e)
            return [TokenBalance(symbol="?", name="Token registry", ledger_id="", error=str(e) or type(e).__name__)]

        static_ids = {t.ledger_id for t in self._static.values()}
        rows: list[Awaitable[TokenBalance]] = []
        for entry in registered:
            # Static entry wins; the registered duplicate is not merged.
            if entry.canister_id in static_ids:
                continue
            if entry.metadata is None:
                rows.append(_missing_metadata_row(entry))
                continue
            rows.append(self._balance_row(entry.metadata, account))

        return list(await asyncio.gather(*rows))

    async def get_all_balances(self, account: Account, *, hide_zero_balances: bool = False) -> list[TokenBalance]:
        """Balances for every static and registered token.

        Never raises: each failing token becomes an error row.
        """

        static_rows = await asyncio.gather(*(self._balance_row(t, account) for t in self._static.values()))
        dynamic_rows = await self._dynamic_rows(account)

        rows = [*static_rows, *dynamic_rows]
        if hide_zero_balances:
            rows = [r for r in rows if r.is_error or r.balance != 0]
        return rows


async def registered_token_lines(aggregator: BalanceAggregator) -> list[str]:
    registered = await aggregator.fetch_registered_tokens()
    if not registered:
        return ["No tokens are registered."]

    lines = ["Registered tokens:"]
    for entry in registered:
        if entry.metadata is None:
            lines.append(f"  {entry.canister_id} (metadata pending)")
        else:
            meta = entry.metadata
            lines.append(f"  {meta.symbol} - {meta.name} ({entry.canister_id})")
    return lines


def balance_lines(rows: list[TokenBalance]) -> list[str]:
    if not rows:
        return ["No balances to show."]

    lines = ["Wallet balances:"]
    for row in rows:
        if row.is_error:
            lines.append(f"  {row.symbol} ({row.name}): error - {row.error}")
        else:
            lines.append(f"  {row.symbol}: {row.formatted}")
    return lines


async def _missing_metadata_row(entry: RegisteredToken) -> TokenBalance:
    return TokenBalance(
        symbol="?",
        name=entry.canister_id,
        ledger_id=entry.canister_id,
        error="Token metadata not available",
    )
