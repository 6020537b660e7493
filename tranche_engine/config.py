from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .fees import FeeSchedule
from .fixed_point import DEFAULT_DECIMALS, require_amount, require_bps
from .models import FirstLossCoverConfig
from .pool_calendar import PayPeriodDuration
from .tranches_policy import (
    FIXED_SENIOR_YIELD,
    RISK_ADJUSTED,
    FixedSeniorYieldPolicy,
    RiskAdjustedPolicy,
    TranchesPolicy,
)


@dataclass(frozen=True)
class PoolConfig:
    tranches_policy: str = FIXED_SENIOR_YIELD
    fixed_senior_yield_bps: int = 0
    tranches_risk_adjustment_bps: int = 0
    liquidity_cap: Optional[int] = None        # None = uncapped
    max_senior_junior_ratio: int = 4
    pay_period_duration: PayPeriodDuration = PayPeriodDuration.MONTHLY
    amount_decimals: int = DEFAULT_DECIMALS
    fees: FeeSchedule = field(default_factory=FeeSchedule)
    first_loss_covers: Tuple[FirstLossCoverConfig, ...] = ()  # loss absorption order

    def __post_init__(self):
        if self.tranches_policy not in (FIXED_SENIOR_YIELD, RISK_ADJUSTED):
            raise ValueError(f"Unknown tranches policy: {self.tranches_policy!r}")
        require_bps(self.fixed_senior_yield_bps, "fixed senior yield", upper=None)
        require_bps(self.tranches_risk_adjustment_bps, "tranches risk adjustment")
        if self.liquidity_cap is not None:
            require_amount(self.liquidity_cap, "liquidity cap")
        require_amount(self.max_senior_junior_ratio, "max senior junior ratio")
        require_amount(self.amount_decimals, "amount decimals")
        names = self.cover_names()
        if len(set(names)) != len(names):
            raise ValueError(f"First loss cover names must be unique, got: {names}")

    def policy(self) -> TranchesPolicy:
        if self.tranches_policy == RISK_ADJUSTED:
            return RiskAdjustedPolicy(self.tranches_risk_adjustment_bps)
        return FixedSeniorYieldPolicy(self.fixed_senior_yield_bps)

    def cover_names(self) -> List[str]:
        return [c.name for c in self.first_loss_covers]

    def cover_index(self, name: str) -> int:
        try:
            return self.cover_names().index(name)
        except ValueError:
            raise KeyError(f"Unknown first loss cover: {name!r}") from None
