"""Tests for purchase module."""
from decimal import Decimal

import pytest

from idleminer.definition import default_definition
from idleminer.errors import ErrorKind, UnknownUpgradeType
from idleminer.purchase import purchase_upgrade
from idleminer.state import GameState


def _make(balance):
    defn = default_definition()
    state = GameState(defn)
    state.balance = Decimal(balance)
    return defn, state


def test_purchase():
    defn, state = _make(250)
    result = purchase_upgrade(state, defn, "gpu")
    assert result.success
    assert result.price == 100
    assert result.hashrate_increment == 5
    assert result.new_owned == 1
    assert state.balance == 150
    assert state.owned("gpu") == 1
    assert state.hashrate == 5


def test_second_unit_costs_more():
    defn, state = _make(215)
    purchase_upgrade(state, defn, "gpu")
    result = purchase_upgrade(state, defn, "gpu")
    assert result.success
    assert result.price == 115
    assert state.balance == 0
    assert state.hashrate == 10


def test_exact_balance_is_enough():
    defn, state = _make(1000)
    assert purchase_upgrade(state, defn, "farm").success
    assert state.balance == 0


def test_insufficient_funds():
    defn, state = _make("99.99")
    result = purchase_upgrade(state, defn, "gpu")
    assert not result.success
    assert result.error is ErrorKind.INSUFFICIENT_FUNDS
    assert result.price == 100
    assert state.balance == Decimal("99.99")
    assert state.owned("gpu") == 0
    assert state.hashrate == 0


def test_unknown_upgrade_raises():
    defn, state = _make(10**6)
    with pytest.raises(UnknownUpgradeType):
        purchase_upgrade(state, defn, "quantum")
    assert state.balance == 10**6


def test_hashrate_matches_owned_upgrades():
    defn, state = _make(10**6)
    for uid in ["gpu", "gpu", "farm", "asic", "gpu", "farm"]:
        assert purchase_upgrade(state, defn, uid).success
    assert state.hashrate == state.derived_hashrate(defn) == 3 * 5 + 2 * 50 + 500
