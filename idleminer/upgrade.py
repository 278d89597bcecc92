from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from idleminer.cost_scaling import CostScaling


@dataclass
class UpgradeDef:
    """Static definition of a purchasable upgrade."""

    id: str
    display_name: str = ""
    base_price: Decimal = Decimal(0)
    hashrate_increment: int = 0
    cost_scaling: CostScaling = field(default_factory=CostScaling.exponential)

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = self.id
        self.base_price = Decimal(self.base_price)

    def price(self, owned: int) -> int:
        return self.cost_scaling.compute(self.base_price, owned)


@dataclass
class UpgradeState:
    """Mutable runtime state for an upgrade."""

    owned: int = 0


@dataclass(frozen=True)
class UpgradeStatus:
    """Read-only snapshot of an upgrade for query results."""

    id: str
    display_name: str
    owned: int
    price: int
    hashrate_increment: int
    affordable: bool
