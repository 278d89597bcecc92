from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from idleminer.errors import ErrorKind, UnknownUpgradeType

if TYPE_CHECKING:
    from idleminer.definition import GameDefinition
    from idleminer.state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PurchaseResult:
    """Outcome of an upgrade purchase attempt."""

    success: bool
    upgrade_id: str
    price: int = 0
    hashrate_increment: int = 0
    new_owned: int = 0
    error: ErrorKind | None = None
    reason: str = ""


def purchase_upgrade(
    state: GameState, definition: GameDefinition, upgrade_id: str
) -> PurchaseResult:
    """Buy one unit of *upgrade_id* if the balance covers its current price."""
    udef = definition.get_upgrade(upgrade_id)
    if udef is None:
        raise UnknownUpgradeType(upgrade_id)

    us = state.upgrades[upgrade_id]
    price = udef.price(us.owned)

    if state.balance < price:
        return PurchaseResult(
            success=False,
            upgrade_id=upgrade_id,
            price=price,
            error=ErrorKind.INSUFFICIENT_FUNDS,
            reason=f"Insufficient funds: {udef.display_name} costs {price}",
        )

    state.debit(Decimal(price))
    us.owned += 1
    state.hashrate += udef.hashrate_increment
    logger.info(
        "Purchased %s #%d for %d (+%d hashrate)",
        upgrade_id,
        us.owned,
        price,
        udef.hashrate_increment,
    )
    return PurchaseResult(
        success=True,
        upgrade_id=upgrade_id,
        price=price,
        hashrate_increment=udef.hashrate_increment,
        new_owned=us.owned,
    )
