"""Custom-tuned mining game driven headlessly on a virtual clock."""
from __future__ import annotations

from decimal import Decimal

from idleminer.clock import VirtualClock
from idleminer.cost_scaling import CostScaling
from idleminer.definition import GameConfig, GameDefinition
from idleminer.formatting import format_status_report
from idleminer.runtime import GameRuntime
from idleminer.upgrade import UpgradeDef


def define_game() -> GameDefinition:
    return GameDefinition(
        config=GameConfig(
            name="Quantum Rig",
            currency_symbol="QB",
            min_withdrawal=Decimal(250),
            storage_key="quantumRig",
        ),
        upgrades=[
            UpgradeDef(
                id="gpu",
                display_name="GPU",
                base_price=Decimal(50),
                hashrate_increment=10,
                cost_scaling=CostScaling.exponential("1.10"),
            ),
            UpgradeDef(
                id="rack",
                display_name="Server Rack",
                base_price=Decimal(2500),
                hashrate_increment=200,
                cost_scaling=CostScaling.exponential("1.20"),
            ),
            UpgradeDef(
                id="fusion",
                display_name="Fusion Core",
                base_price=Decimal(75000),
                hashrate_increment=5000,
                cost_scaling=CostScaling.fixed(),
            ),
        ],
    )


def play(runtime: GameRuntime, clock: VirtualClock, seconds: int) -> list[str]:
    """Keep a manual mine running and buy the cheapest affordable upgrade every second."""
    bought: list[str] = []
    runtime.start()
    for _ in range(seconds):
        runtime.start_manual_mine()
        affordable = [s for s in runtime.get_upgrade_statuses() if s.affordable]
        if affordable:
            cheapest = min(affordable, key=lambda s: s.price)
            if runtime.buy_upgrade(cheapest.id).success:
                bought.append(cheapest.id)
        clock.advance(1)
    runtime.shutdown()
    return bought


if __name__ == "__main__":
    clock = VirtualClock()
    runtime = GameRuntime(define_game(), clock=clock)
    purchases = play(runtime, clock, 3600)
    print(f"Bought {len(purchases)} upgrades in one simulated hour")
    print(format_status_report(runtime))
