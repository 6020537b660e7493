from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from .fixed_point import BP_FACTOR, require_amount, require_bps
from .senior_yield import SeniorYieldTracker

SENIOR = "senior"
JUNIOR = "junior"
TRANCHES = (SENIOR, JUNIOR)


@dataclass(frozen=True)
class TrancheAssets:
    senior: int = 0
    junior: int = 0

    def __post_init__(self):
        require_amount(self.senior, "senior assets")
        require_amount(self.junior, "junior assets")

    @property
    def total(self) -> int:
        return self.senior + self.junior

    def of(self, tranche: str) -> int:
        if tranche == SENIOR:
            return self.senior
        if tranche == JUNIOR:
            return self.junior
        raise ValueError(f"Unknown tranche: {tranche!r}")

    def with_tranche(self, tranche: str, amount: int) -> "TrancheAssets":
        self.of(tranche)
        return replace(self, **{tranche: amount})


@dataclass(frozen=True)
class TrancheLosses:
    """Outstanding (unrecovered) loss absorbed by each tranche."""
    senior_loss: int = 0
    junior_loss: int = 0

    def __post_init__(self):
        require_amount(self.senior_loss, "senior loss")
        require_amount(self.junior_loss, "junior loss")

    @property
    def total(self) -> int:
        return self.senior_loss + self.junior_loss

    def __add__(self, other: "TrancheLosses") -> "TrancheLosses":
        return TrancheLosses(
            senior_loss=self.senior_loss + other.senior_loss,
            junior_loss=self.junior_loss + other.junior_loss,
        )


@dataclass(frozen=True)
class FirstLossCoverConfig:
    name: str
    cover_rate_per_loss_bps: int = BP_FACTOR
    cover_cap_per_loss: int = 0
    risk_yield_multiplier_bps: int = 0
    min_liquidity: int = 0
    max_liquidity: Optional[int] = None  # None = no liquidity cap

    def __post_init__(self):
        require_bps(self.cover_rate_per_loss_bps, f"{self.name} cover rate per loss")
        require_amount(self.cover_cap_per_loss, f"{self.name} cover cap per loss")
        # multipliers above 100% are allowed, a cover can be paid more than its pro-rata weight
        require_bps(self.risk_yield_multiplier_bps, f"{self.name} risk yield multiplier", upper=None)
        require_amount(self.min_liquidity, f"{self.name} min liquidity")
        if self.max_liquidity is not None:
            require_amount(self.max_liquidity, f"{self.name} max liquidity")


@dataclass(frozen=True)
class FirstLossCoverState:
    config: FirstLossCoverConfig
    asset: int = 0
    covered_loss: int = 0  # loss absorbed and not yet recovered

    def __post_init__(self):
        require_amount(self.asset, f"{self.config.name} asset")
        require_amount(self.covered_loss, f"{self.config.name} covered loss")

    @property
    def name(self) -> str:
        return self.config.name


@dataclass(frozen=True)
class LossDistribution:
    new_assets: TrancheAssets
    losses: TrancheLosses
    cover_losses: Tuple[int, ...]
    covers: Tuple[FirstLossCoverState, ...]
    uncovered_loss: int = 0


@dataclass(frozen=True)
class RecoveryDistribution:
    remaining_recovery: int
    new_assets: TrancheAssets
    new_losses: TrancheLosses
    senior_recovery: int
    junior_recovery: int
    cover_recoveries: Tuple[int, ...]
    covers: Tuple[FirstLossCoverState, ...]


@dataclass(frozen=True)
class PoolState:
    assets: TrancheAssets = field(default_factory=TrancheAssets)
    losses: TrancheLosses = field(default_factory=TrancheLosses)
    tracker: SeniorYieldTracker = field(default_factory=SeniorYieldTracker)
    covers: Tuple[FirstLossCoverState, ...] = ()

    @property
    def cover_assets(self) -> int:
        return sum(c.asset for c in self.covers)

    @property
    def total_capital(self) -> int:
        """Everything that can absorb a loss: both tranches plus every first loss cover."""
        return self.assets.total + self.cover_assets


@dataclass(frozen=True)
class PoolEvent:
    timestamp: int
    kind: str                     # profit, loss, recovery, deposit, withdraw, cover_deposit, payout
    amount: int = 0
    target: Optional[str] = None  # tranche name or cover name, where the event needs one


@dataclass
class SettlementResult:
    """One settled event: what came in, where each unit went, and the closing state."""
    timestamp: int
    kind: str
    amount: int
    opening: PoolState
    closing: PoolState
    steps: List[Dict[str, object]] = field(default_factory=list)  # ordered allocation steps
    fees_total: int = 0
    uncovered_loss: int = 0
    remaining_recovery: int = 0
    cover_payouts: int = 0


@dataclass(frozen=True)
class ProfitDistribution:
    new_assets: TrancheAssets
    senior_profit: int
    junior_profit: int
    tracker: SeniorYieldTracker
