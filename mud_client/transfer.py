from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from statemachine import State, StateMachine

from mud_client.accounts import Account, is_valid_principal
from mud_client.api.models import TokenDescriptor
from mud_client.core.errors import InsufficientFunds, TransferRequestError
from mud_client.core.result import Err, unwrap
from mud_client.remote import RemoteActor, TransferArgs
from mud_client.tokens import format_token_amount, parse_token_amount
from mud_client.wallet import BalanceAggregator

logger = logging.getLogger(__name__)


class TransferPhase(StrEnum):
    idle = "idle"
    awaiting_confirmation = "awaiting_confirmation"


class TransferFSM(StateMachine):
    """Guards the two-step send: request, then an explicit yes/no.

    A new request while one is pending replaces it (only one can exist).
    """

    idle = State(TransferPhase.idle.value, value=TransferPhase.idle.value, initial=True)
    awaiting_confirmation = State(
        TransferPhase.awaiting_confirmation.value,
        value=TransferPhase.awaiting_confirmation.value,
    )

    requested = idle.to(awaiting_confirmation) | awaiting_confirmation.to.itself()
    settled = awaiting_confirmation.to(idle)

    @property
    def phase(self) -> TransferPhase:
        return TransferPhase(str(self.current_state.value))


@dataclass(frozen=True, slots=True)
class PendingTransfer:
    token: TokenDescriptor
    amount: int
    target_principal: str
    # None when the recipient was given as a raw principal.
    recipient_name: str | None
    sender_name: str

    @property
    def recipient_label(self) -> str:
        if self.recipient_name:
            return f"{self.recipient_name} ({self.target_principal})"
        return self.target_principal

    @property
    def amount_text(self) -> str:
        return f"{format_token_amount(self.amount, self.token.decimals)} {self.token.symbol}"


class TransferWorkflow:
    def __init__(
        self,
        *,
        actor: RemoteActor,
        aggregator: BalanceAggregator,
        account: Account,
        sender_name: str,
    ) -> None:
        self._actor = actor
        self._aggregator = aggregator
        self._account = account
        self._sender_name = sender_name
        self._fsm = TransferFSM()
        self._pending: PendingTransfer | None = None

    @property
    def phase(self) -> TransferPhase:
        return self._fsm.phase

    @property
    def pending(self) -> PendingTransfer | None:
        return self._pending

    @property
    def awaiting_confirmation(self) -> bool:
        return self._fsm.phase == TransferPhase.awaiting_confirmation

    async def _resolve_recipient(self, recipient_text: str) -> tuple[str, str | None]:
        text = recipient_text.strip()
        principal = await self._actor.get_principal_by_name(text)
        if principal:
            return principal, text
        if is_valid_principal(text):
            return text, None
        raise TransferRequestError(f"No player or valid principal found for '{text}'")

    async def request_transfer(self, amount_text: str, token_symbol: str, recipient_text: str) -> list[str]:
        """Resolve everything up front and park the transfer until confirmed.

        On any failure the workflow stays where it was.
        """

        target, recipient_name = await self._resolve_recipient(recipient_text)
        token = await self._aggregator.resolve_token(token_symbol)

        try:
            amount = parse_token_amount(amount_text, token.decimals)
        except ValueError as e:
            raise TransferRequestError(str(e)) from e
        if amount <= 0:
            raise TransferRequestError("Amount must be greater than zero")

        pending = PendingTransfer(
            token=token,
            amount=amount,
            target_principal=target,
            recipient_name=recipient_name,
            sender_name=self._sender_name,
        )
        if self._pending is not None:
            logger.info("Replacing pending transfer of %s", self._pending.amount_text)

        self._pending = pending
        self._fsm.send("requested")

        fee = format_token_amount(token.fee, token.decimals)
        return [
            f"Send {pending.amount_text} to {pending.recipient_label}? (fee: {fee} {token.symbol})",
            "Type 'yes' to confirm or 'no' to cancel.",
        ]

    def _claim(self) -> PendingTransfer | None:
        pending = self._pending
        if pending is not None:
            self._pending = None
            self._fsm.send("settled")
        return pending

    async def confirm(self, answer: str) -> list[str]:
        """Handle the yes/no answer for the pending transfer.

        The pending transfer is claimed before the first remote call, so a second
        "yes" arriving while this one is in flight finds nothing to confirm.
        """

        normalized = answer.strip().casefold()
        if normalized not in {"yes", "no"}:
            return ["Please type 'yes' to confirm or 'no' to cancel."]

        pending = self._claim()
        if pending is None:
            return ["There is no transfer waiting for confirmation."]

        if normalized == "no":
            return ["Transfer cancelled."]

        token = pending.token
        ledger = self._actor.ledger(token.ledger_id)

        balance = await ledger.balance_of(self._account)
        required = pending.amount + token.fee
        if balance < required:
            raise InsufficientFunds(
                f"Insufficient funds: you have {format_token_amount(balance, token.decimals)} {token.symbol}, "
                f"need {format_token_amount(required, token.decimals)} {token.symbol} including the fee."
            )

        tx_id = unwrap(
            await ledger.transfer(
                TransferArgs(to=Account(owner=pending.target_principal), amount=pending.amount, fee=token.fee)
            )
        )

        await self._notify(pending, tx_id)
        return [f"Sent {pending.amount_text} to {pending.recipient_label}. Transaction id: {tx_id}"]

    async def _notify(self, pending: PendingTransfer, tx_id: int) -> None:
        # The ledger transfer already happened; narration is best effort.
        try:
            res = await self._actor.notify_token_transfer(
                token_symbol=pending.token.symbol,
                amount=pending.amount,
                sender_name=pending.sender_name,
                recipient=pending.target_principal,
                tx_id=tx_id,
            )
        except Exception:
            logger.warning("Transfer %s succeeded but notifying the backend failed", tx_id, exc_info=True)
            return
        if isinstance(res, Err):
            logger.warning("Transfer %s succeeded but the backend rejected the notification: %s", tx_id, res.message)
