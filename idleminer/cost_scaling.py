from __future__ import annotations

import math
from decimal import Decimal
from typing import Callable


class CostScaling:
    """Determines how an upgrade's price changes with its owned count."""

    def __init__(
        self,
        fn: Callable[[Decimal, int], int],
        growth_rate: Decimal | None = None,
    ) -> None:
        self._fn = fn
        self.growth_rate = growth_rate

    def compute(self, base_price: Decimal, owned: int) -> int:
        if owned < 0:
            raise ValueError(f"Owned count cannot be negative: {owned}")
        return self._fn(base_price, owned)

    @classmethod
    def fixed(cls) -> CostScaling:
        """Price never changes."""
        return cls(lambda base, _owned: math.floor(base))

    @classmethod
    def exponential(cls, growth_rate: Decimal | str = "1.15") -> CostScaling:
        """Price = floor(base * growth_rate^owned)."""
        gr = Decimal(growth_rate)  # capture

        def _compute(base: Decimal, owned: int) -> int:
            return math.floor(base * gr**owned)

        return cls(_compute, growth_rate=gr)

    @classmethod
    def custom(cls, fn: Callable[[Decimal, int], int]) -> CostScaling:
        """Arbitrary price function."""
        return cls(fn)
