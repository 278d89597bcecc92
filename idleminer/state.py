from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from idleminer.upgrade import UpgradeState

if TYPE_CHECKING:
    from idleminer.definition import GameDefinition


class GameState:
    """Mutable runtime container holding all game state."""

    def __init__(self, definition: GameDefinition) -> None:
        self.balance: Decimal = Decimal(0)
        self.hashrate: int = 0
        self.mined: Decimal = Decimal(0)
        self.upgrades: dict[str, UpgradeState] = {}
        self.last_save_timestamp: int | None = None

        for udef in definition.upgrades:
            self.upgrades[udef.id] = UpgradeState()

    def owned(self, id: str) -> int:
        us = self.upgrades.get(id)
        return us.owned if us else 0

    def credit(self, amount: Decimal) -> None:
        """Add freshly produced currency to both balance and lifetime total."""
        if amount < 0:
            raise ValueError(f"Cannot credit a negative amount: {amount}")
        self.balance += amount
        self.mined += amount

    def debit(self, amount: Decimal) -> None:
        if amount < 0:
            raise ValueError(f"Cannot debit a negative amount: {amount}")
        if amount > self.balance:
            raise ValueError(f"Debit of {amount} exceeds balance {self.balance}")
        self.balance -= amount

    def derived_hashrate(self, definition: GameDefinition) -> int:
        """Hashrate implied by the owned upgrade counts."""
        return sum(
            self.owned(udef.id) * udef.hashrate_increment
            for udef in definition.upgrades
        )
