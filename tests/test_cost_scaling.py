"""Tests for cost_scaling and pricing modules."""
from decimal import Decimal

import pytest

from idleminer.cost_scaling import CostScaling
from idleminer.errors import UnknownUpgradeType
from idleminer.pricing import price


def test_fixed():
    cs = CostScaling.fixed()
    assert cs.compute(Decimal(100), 0) == 100
    assert cs.compute(Decimal(100), 10) == 100


def test_exponential():
    cs = CostScaling.exponential(2)
    assert cs.compute(Decimal(100), 0) == 100
    assert cs.compute(Decimal(100), 1) == 200
    assert cs.compute(Decimal(100), 3) == 800


def test_exponential_default_rate_floors():
    cs = CostScaling.exponential()
    assert cs.growth_rate == Decimal("1.15")
    assert cs.compute(Decimal(100), 1) == 115
    # 100 * 1.15^2 = 132.25
    assert cs.compute(Decimal(100), 2) == 132
    # 100 * 1.15^3 = 152.0875
    assert cs.compute(Decimal(100), 3) == 152


def test_returns_int():
    assert isinstance(CostScaling.exponential().compute(Decimal(1000), 5), int)


def test_negative_owned_rejected():
    with pytest.raises(ValueError, match="cannot be negative"):
        CostScaling.exponential().compute(Decimal(100), -1)


def test_custom():
    cs = CostScaling.custom(lambda base, owned: int(base) * (owned + 1))
    assert cs.compute(Decimal(10), 0) == 10
    assert cs.compute(Decimal(10), 2) == 30
    assert cs.growth_rate is None


def test_price_gpu():
    assert price("gpu", 0) == 100
    assert price("gpu", 1) == 115


def test_price_catalog_base_prices():
    assert price("farm", 0) == 1000
    assert price("asic", 0) == 10000
    assert price("farm", 1) == 1150


@pytest.mark.parametrize("upgrade_id", ["gpu", "farm", "asic"])
def test_price_strictly_increasing(upgrade_id):
    prices = [price(upgrade_id, k) for k in range(60)]
    assert all(a < b for a, b in zip(prices, prices[1:]))


def test_price_unknown_upgrade():
    with pytest.raises(UnknownUpgradeType):
        price("quantum", 0)


def test_unknown_upgrade_is_key_error():
    with pytest.raises(KeyError):
        price("quantum", 0)
