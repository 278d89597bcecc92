from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import TYPE_CHECKING

from idleminer.errors import ErrorKind

if TYPE_CHECKING:
    from idleminer.definition import GameConfig
    from idleminer.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WithdrawalResult:
    """Outcome of a withdrawal request against the local ledger."""

    success: bool
    amount: Decimal | None = None
    destination: str = ""
    error: ErrorKind | None = None
    reason: str = ""


def parse_amount(value: object) -> Decimal | None:
    """Interpret a player-supplied amount. Returns None unless it is a finite number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not amount.is_finite():
        return None
    return amount


def request_withdrawal(
    state: GameState, config: GameConfig, amount: object, destination: str | None
) -> WithdrawalResult:
    """Validate and debit a withdrawal. No funds leave the local ledger."""
    dest = (destination or "").strip()
    if not dest:
        return WithdrawalResult(
            success=False,
            error=ErrorKind.MISSING_DESTINATION,
            reason="Enter a wallet address",
        )

    parsed = parse_amount(amount)
    if parsed is not None:
        # Finer digits than the ledger keeps are dropped
        try:
            parsed = parsed.quantize(config.amount_quantum, rounding=ROUND_DOWN)
        except InvalidOperation:
            parsed = None
    if parsed is None or parsed < config.min_withdrawal:
        return WithdrawalResult(
            success=False,
            amount=parsed,
            destination=dest,
            error=ErrorKind.BELOW_MINIMUM_WITHDRAWAL,
            reason=f"Minimum withdrawal is {config.min_withdrawal} {config.currency_symbol}",
        )

    if parsed > state.balance:
        return WithdrawalResult(
            success=False,
            amount=parsed,
            destination=dest,
            error=ErrorKind.INSUFFICIENT_FUNDS,
            reason="Insufficient balance",
        )

    state.debit(parsed)
    logger.info("Withdrawal of %s accepted to %s", parsed, dest)
    return WithdrawalResult(success=True, amount=parsed, destination=dest)
