from __future__ import annotations

import fakeredis
import pytest

from conftest import ME, FakeActor
from mud_client.accounts import Account
from mud_client.api.models import RegisteredToken, TokenDescriptor
from mud_client.core.errors import TransportError
from mud_client.core.result import Err, Ok
from mud_client.preferences import (
    WALLET_PREFS_KEY_PREFIX,
    WalletPreferences,
    get_wallet_preferences,
    save_wallet_preferences,
)
from mud_client.tokens import STATIC_TOKENS
from mud_client.wallet import BalanceAggregator, balance_lines, registered_token_lines

ACCOUNT = Account(owner=ME)


def _set_balance(actor: FakeActor, symbol: str, amount: int) -> None:
    actor.ledger(STATIC_TOKENS[symbol].ledger_id).balances[ME] = amount


@pytest.mark.asyncio
async def test_static_balances_in_table_order(actor: FakeActor) -> None:
    _set_balance(actor, "ICP", 250_000_000)
    _set_balance(actor, "SNEED", 1)

    rows = await BalanceAggregator(actor=actor).get_all_balances(ACCOUNT)

    assert [(r.symbol, r.formatted) for r in rows] == [("ICP", "2.5"), ("DKP", "0"), ("SNEED", "0.00000001")]
    assert balance_lines(rows) == ["Wallet balances:", "  ICP: 2.5", "  DKP: 0", "  SNEED: 0.00000001"]


@pytest.mark.asyncio
async def test_one_failing_ledger_becomes_error_row(actor: FakeActor) -> None:
    _set_balance(actor, "ICP", 100_000_000)
    actor.ledger(STATIC_TOKENS["DKP"].ledger_id).fail_balance = TransportError("ledger offline")

    rows = await BalanceAggregator(actor=actor).get_all_balances(ACCOUNT)

    dkp = next(r for r in rows if r.symbol == "DKP")
    assert dkp.is_error and dkp.balance is None and dkp.formatted == "?"
    assert "  DKP (Dragginz): error - ledger offline" in balance_lines(rows)
    assert "  ICP: 1" in balance_lines(rows)


@pytest.mark.asyncio
async def test_hide_zero_keeps_error_rows(actor: FakeActor) -> None:
    _set_balance(actor, "DKP", 5)
    actor.ledger(STATIC_TOKENS["SNEED"].ledger_id).fail_balance = TransportError("x")

    rows = await BalanceAggregator(actor=actor).get_all_balances(ACCOUNT, hide_zero_balances=True)

    assert [r.symbol for r in rows] == ["DKP", "SNEED"]


@pytest.mark.asyncio
async def test_everything_hidden(actor: FakeActor) -> None:
    rows = await BalanceAggregator(actor=actor).get_all_balances(ACCOUNT, hide_zero_balances=True)
    assert balance_lines(rows) == ["No balances to show."]


@pytest.mark.asyncio
async def test_registered_tokens_are_added_without_duplicates(actor: FakeActor) -> None:
    gold = TokenDescriptor(symbol="GLD", name="Gold", ledger_id="gld-ledger", decimals=2, fee=1)
    actor.registered = [
        # Same ledger as the static ICP entry.
        RegisteredToken(
            canister_id=STATIC_TOKENS["ICP"].ledger_id,
            metadata=STATIC_TOKENS["ICP"].model_copy(update={"name": "Other"}),
        ),
        RegisteredToken(canister_id="gld-ledger", metadata=gold),
        RegisteredToken(canister_id="pending-ledger"),
    ]
    actor.ledger("gld-ledger").balances[ME] = 1234

    rows = await BalanceAggregator(actor=actor).get_all_balances(ACCOUNT)

    assert [r.symbol for r in rows] == ["ICP", "DKP", "SNEED", "GLD", "?"]
    assert rows[3].formatted == "12.34"
    assert rows[4].error == "Token metadata not available"


@pytest.mark.asyncio
async def test_registry_failure_refreshes_once_then_retries(actor: FakeActor) -> None:
    gold = TokenDescriptor(symbol="GLD", name="Gold", ledger_id="gld-ledger", decimals=2, fee=1)
    actor.overrides["get_registered_tokens"] = [Err("stale"), Ok([RegisteredToken(canister_id="gld-ledger", metadata=gold)])]

    rows = await BalanceAggregator(actor=actor).get_all_balances(ACCOUNT)

    assert actor.called("refresh_token_metadata") == [(None,)]
    assert len(actor.called("get_registered_tokens")) == 2
    assert rows[-1].symbol == "GLD"


@pytest.mark.asyncio
async def test_registry_failure_after_retry_is_one_error_row(actor: FakeActor) -> None:
    actor.overrides["get_registered_tokens"] = [Err("stale"), Err("still stale")]

    rows = await BalanceAggregator(actor=actor).get_all_balances(ACCOUNT)

    assert len(actor.called("refresh_token_metadata")) == 1
    assert [r.symbol for r in rows[:3]] == ["ICP", "DKP", "SNEED"]
    assert rows[3].name == "Token registry"
    assert rows[3].error == "still stale"


@pytest.mark.asyncio
async def test_registered_token_listing(actor: FakeActor) -> None:
    aggregator = BalanceAggregator(actor=actor)
    assert await registered_token_lines(aggregator) == ["No tokens are registered."]

    actor.registered = [
        RegisteredToken(
            canister_id="gld-ledger",
            metadata=TokenDescriptor(symbol="GLD", name="Gold", ledger_id="gld-ledger", decimals=2, fee=1),
        ),
        RegisteredToken(canister_id="pending-ledger"),
    ]
    assert await registered_token_lines(aggregator) == [
        "Registered tokens:",
        "  GLD - Gold (gld-ledger)",
        "  pending-ledger (metadata pending)",
    ]


def test_preferences_round_trip(r: fakeredis.FakeRedis) -> None:
    assert get_wallet_preferences(r=r, principal=ME) == WalletPreferences()

    save_wallet_preferences(r=r, principal=ME, prefs=WalletPreferences(hide_zero_balances=True))

    assert get_wallet_preferences(r=r, principal=ME).hide_zero_balances is True
    assert r.get(f"{WALLET_PREFS_KEY_PREFIX}{ME}") is not None


def test_unreadable_preferences_fall_back_to_defaults(r: fakeredis.FakeRedis) -> None:
    r.set(f"{WALLET_PREFS_KEY_PREFIX}{ME}", "{not json")
    assert get_wallet_preferences(r=r, principal=ME) == WalletPreferences()


@pytest.mark.asyncio
async def test_raised_registry_failure_is_refreshed_and_retried(actor: FakeActor) -> None:
    gold = TokenDescriptor(symbol="GLD", name="Gold", ledger_id="gld-ledger", decimals=2, fee=1)
    actor.overrides["get_registered_tokens"] = [
        TransportError("registry timeout"),
        Ok([RegisteredToken(canister_id="gld-ledger", metadata=gold)]),
    ]

    rows = await BalanceAggregator(actor=actor).get_all_balances(ACCOUNT)

    assert actor.called("refresh_token_metadata") == [(None,)]
    assert len(actor.called("get_registered_tokens")) == 2
    assert rows[-1].symbol == "GLD" and not rows[-1].is_error


@pytest.mark.asyncio
async def test_raised_refresh_still_retries_registry(actor: FakeActor) -> None:
    gold = TokenDescriptor(symbol="GLD", name="Gold", ledger_id="gld-ledger", decimals=2, fee=1)
    actor.overrides["get_registered_tokens"] = [
        Err("stale"),
        Ok([RegisteredToken(canister_id="gld-ledger", metadata=gold)]),
    ]
    actor.overrides["refresh_token_metadata"] = TransportError("refresh down")

    rows = await BalanceAggregator(actor=actor).get_all_balances(ACCOUNT)

    assert len(actor.called("refresh_token_metadata")) == 1
    assert len(actor.called("get_registered_tokens")) == 2
    assert rows[-1].symbol == "GLD" and not rows[-1].is_error


@pytest.mark.asyncio
async def test_failing_static_ledger_next_to_working_registered_token(actor: FakeActor) -> None:
    actor.ledger(STATIC_TOKENS["ICP"].ledger_id).fail_balance = TransportError("ledger offline")
    actor.registered = [
        RegisteredToken(
            canister_id="gld-ledger",
            metadata=TokenDescriptor(symbol="GLD", name="Gold", ledger_id="gld-ledger", decimals=2, fee=1),
        )
    ]
    actor.ledger("gld-ledger").balances[ME] = 500

    rows = await BalanceAggregator(actor=actor, static_tokens={"ICP": STATIC_TOKENS["ICP"]}).get_all_balances(ACCOUNT)

    assert len(rows) == 2
    icp, gld = rows
    assert icp.symbol == "ICP" and icp.is_error and icp.balance is None
    assert gld.symbol == "GLD" and not gld.is_error and gld.balance == 500
