from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from idleminer.cost_scaling import CostScaling
from idleminer.upgrade import UpgradeDef


@dataclass
class GameConfig:
    """Top-level game configuration. Defaults are the shipped game's tuning."""

    name: str = "Crypto Miner Pro"
    currency_symbol: str = "CR"
    tick_rate: int = 10
    accrual_divisor: int = 10000
    autosave_interval_ms: int = 30_000
    offline_cap_seconds: int = 24 * 60 * 60
    mining_step_interval: float = 0.05
    mining_step_pct: int = 2
    manual_base_reward: Decimal = Decimal(1)
    manual_hashrate_divisor: int = 100
    min_withdrawal: Decimal = Decimal(100)
    amount_places: int = 4
    storage_key: str = "cryptoMinerProSimulator"

    def __post_init__(self) -> None:
        self.manual_base_reward = Decimal(self.manual_base_reward)
        self.min_withdrawal = Decimal(self.min_withdrawal)

    @property
    def amount_quantum(self) -> Decimal:
        """Smallest balance step the ledger keeps."""
        return Decimal(1).scaleb(-self.amount_places)

    @property
    def tick_interval(self) -> float:
        """Seconds between accrual ticks."""
        return 1.0 / self.tick_rate

    @property
    def mining_duration(self) -> float:
        """Seconds a manual mining action takes from start to payout."""
        steps = -(-100 // self.mining_step_pct)
        return steps * self.mining_step_interval


@dataclass
class GameDefinition:
    """Complete static definition of the game: config plus upgrade catalog."""

    config: GameConfig = field(default_factory=GameConfig)
    upgrades: list[UpgradeDef] = field(default_factory=list)

    _upgrades_by_id: dict[str, UpgradeDef] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        self._upgrades_by_id = {u.id: u for u in self.upgrades}

    def get_upgrade(self, id: str) -> UpgradeDef | None:
        return self._upgrades_by_id.get(id)

    def upgrade_ids(self) -> list[str]:
        return [u.id for u in self.upgrades]

    def validate(self) -> list[str]:
        """Check for common definition errors. Returns list of error messages."""
        errors: list[str] = []
        cfg = self.config

        seen: set[str] = set()
        for u in self.upgrades:
            if u.id in seen:
                errors.append(f"Duplicate upgrade ID: {u.id!r}")
            seen.add(u.id)

        for u in self.upgrades:
            if u.base_price <= 0:
                errors.append(f"Upgrade {u.id!r} must have a positive base price")
            if u.hashrate_increment <= 0:
                errors.append(
                    f"Upgrade {u.id!r} must have a positive hashrate increment"
                )
            gr = u.cost_scaling.growth_rate
            if gr is not None and gr <= 1:
                errors.append(
                    f"Upgrade {u.id!r} growth rate {gr} must be greater than 1"
                )

        if cfg.tick_rate <= 0:
            errors.append("tick_rate must be positive")
        if cfg.accrual_divisor <= 0:
            errors.append("accrual_divisor must be positive")
        if cfg.manual_hashrate_divisor <= 0:
            errors.append("manual_hashrate_divisor must be positive")
        if not 0 < cfg.mining_step_pct <= 100:
            errors.append("mining_step_pct must be within 1..100")
        if cfg.mining_step_interval <= 0:
            errors.append("mining_step_interval must be positive")
        if cfg.amount_places < 0:
            errors.append("amount_places cannot be negative")
        if cfg.offline_cap_seconds < 0:
            errors.append("offline_cap_seconds cannot be negative")
        if not cfg.storage_key:
            errors.append("storage_key cannot be empty")

        return errors


def default_definition() -> GameDefinition:
    """The shipped upgrade catalog: GPU, mining farm, ASIC."""
    return GameDefinition(
        config=GameConfig(),
        upgrades=[
            UpgradeDef(
                id="gpu",
                display_name="GPU",
                base_price=Decimal(100),
                hashrate_increment=5,
                cost_scaling=CostScaling.exponential("1.15"),
            ),
            UpgradeDef(
                id="farm",
                display_name="Mining Farm",
                base_price=Decimal(1000),
                hashrate_increment=50,
                cost_scaling=CostScaling.exponential("1.15"),
            ),
            UpgradeDef(
                id="asic",
                display_name="ASIC",
                base_price=Decimal(10000),
                hashrate_increment=500,
                cost_scaling=CostScaling.exponential("1.15"),
            ),
        ],
    )
