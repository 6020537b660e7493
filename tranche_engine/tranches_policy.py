"""
Profit split between the senior and junior tranches.

Two interchangeable policies share the same loss and recovery waterfall:
  - FixedSeniorYieldPolicy: senior is paid its accrued fixed yield first,
    junior takes the rest.
  - RiskAdjustedPolicy: pro-rata split, with a slice of the senior share
    moved to junior as payment for subordination risk.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

from .exceptions import ZeroTotalAssetsError
from .fixed_point import BP_FACTOR, mul_div, require_amount, require_bps
from .models import ProfitDistribution, TrancheAssets
from .senior_yield import SeniorYieldTracker

logger = logging.getLogger(__name__)

FIXED_SENIOR_YIELD = "fixed_senior_yield"
RISK_ADJUSTED = "risk_adjusted"


def distribute_profit_fixed_senior_yield(
    profit: int,
    assets: TrancheAssets,
    yield_bps: int,
    timestamp: int,
    tracker: SeniorYieldTracker,
) -> Tuple[TrancheAssets, SeniorYieldTracker]:
    require_amount(profit, "profit")
    new_tracker = tracker.accrue(timestamp, yield_bps)

    senior_profit = min(profit, new_tracker.unpaid_yield)
    junior_profit = profit - senior_profit

    new_assets = TrancheAssets(senior=assets.senior + senior_profit, junior=assets.junior + junior_profit)
    new_tracker = new_tracker.pay(senior_profit, new_assets.senior)
    if new_tracker.unpaid_yield:
        logger.debug("Carrying %d of unpaid senior yield forward", new_tracker.unpaid_yield)
    return new_assets, new_tracker


def distribute_profit_risk_adjusted(profit: int, assets: TrancheAssets, risk_adjustment_bps: int) -> TrancheAssets:
    require_amount(profit, "profit")
    require_bps(risk_adjustment_bps, "risk adjustment")
    total_assets = assets.total
    if total_assets == 0:
        raise ZeroTotalAssetsError("cannot split profit pro rata: both tranches are empty")

    senior_share = mul_div(profit, assets.senior, total_assets)
    adjusted_senior_profit = mul_div(senior_share, BP_FACTOR - risk_adjustment_bps, BP_FACTOR)
    junior_profit = profit - adjusted_senior_profit
    return TrancheAssets(senior=assets.senior + adjusted_senior_profit, junior=assets.junior + junior_profit)


class TranchesPolicy(ABC):
    name: str

    @abstractmethod
    def distribute_profit(
        self, profit: int, assets: TrancheAssets, timestamp: int, tracker: SeniorYieldTracker
    ) -> ProfitDistribution:
        ...

    def refresh_tracker(self, tracker: SeniorYieldTracker, timestamp: int, senior_assets: int) -> SeniorYieldTracker:
        """Keeps the senior yield tracker in step after senior assets change outside a profit split."""
        return tracker


@dataclass(frozen=True)
class FixedSeniorYieldPolicy(TranchesPolicy):
    yield_bps: int
    name: str = FIXED_SENIOR_YIELD

    def distribute_profit(self, profit, assets, timestamp, tracker):
        new_assets, new_tracker = distribute_profit_fixed_senior_yield(
            profit, assets, self.yield_bps, timestamp, tracker
        )
        return ProfitDistribution(
            new_assets=new_assets,
            senior_profit=new_assets.senior - assets.senior,
            junior_profit=new_assets.junior - assets.junior,
            tracker=new_tracker,
        )

    def refresh_tracker(self, tracker, timestamp, senior_assets):
        return tracker.refresh(timestamp, self.yield_bps, senior_assets)


@dataclass(frozen=True)
class RiskAdjustedPolicy(TranchesPolicy):
    risk_adjustment_bps: int
    name: str = RISK_ADJUSTED

    def distribute_profit(self, profit, assets, timestamp, tracker):
        new_assets = distribute_profit_risk_adjusted(profit, assets, self.risk_adjustment_bps)
        return ProfitDistribution(
            new_assets=new_assets,
            senior_profit=new_assets.senior - assets.senior,
            junior_profit=new_assets.junior - assets.junior,
            tracker=tracker,
        )
