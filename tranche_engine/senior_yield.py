"""
Daily accrual of the senior tranche's fixed yield.

The senior tranche is promised ``yield_bps`` a year on its outstanding debt
whether or not profit shows up on time. Yield accrues in whole 30/360 days
into ``unpaid_yield`` and is paid down as profit arrives.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from .fixed_point import BP_FACTOR, require_amount
from .pool_calendar import DAYS_IN_A_YEAR, days_diff, start_of_next_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeniorYieldTracker:
    senior_debt: int = 0
    unpaid_yield: int = 0
    last_updated_date: int = 0  # always a day boundary; 0 = never started

    def __post_init__(self):
        require_amount(self.senior_debt, "senior debt")
        require_amount(self.unpaid_yield, "unpaid yield")
        require_amount(self.last_updated_date, "last updated date")

    @classmethod
    def start(cls, senior_debt: int, timestamp: int) -> "SeniorYieldTracker":
        return cls(senior_debt=senior_debt, unpaid_yield=0, last_updated_date=start_of_next_day(timestamp))

    def accrue(self, timestamp: int, yield_bps: int) -> "SeniorYieldTracker":
        require_amount(yield_bps, "yield bps")
        next_day = start_of_next_day(timestamp)
        if self.last_updated_date == 0:
            return replace(self, last_updated_date=next_day)
        if next_day <= self.last_updated_date:
            # same day (or a clock that went backwards): nothing new to accrue
            return self

        days_passed = days_diff(self.last_updated_date, next_day)
        if days_passed == 0:
            return self
        new_yield = self.senior_debt * days_passed * yield_bps // (DAYS_IN_A_YEAR * BP_FACTOR)
        logger.debug(
            "Accrued %d senior yield over %d days on debt %d at %d bps",
            new_yield, days_passed, self.senior_debt, yield_bps,
        )
        return replace(self, unpaid_yield=self.unpaid_yield + new_yield, last_updated_date=next_day)

    def pay(self, senior_profit: int, senior_assets: int) -> "SeniorYieldTracker":
        """Applies profit paid to the senior tranche against accrued yield."""
        if senior_profit > self.unpaid_yield:
            raise ValueError(f"senior profit {senior_profit} exceeds unpaid yield {self.unpaid_yield}")
        return replace(self, unpaid_yield=self.unpaid_yield - senior_profit, senior_debt=senior_assets)

    def refresh(self, timestamp: int, yield_bps: int, senior_assets: int) -> "SeniorYieldTracker":
        """Accrues up to today, then re-bases the debt on the current senior tranche assets."""
        return replace(self.accrue(timestamp, yield_bps), senior_debt=require_amount(senior_assets, "senior assets"))

    def change_rate(self, timestamp: int, old_yield_bps: int) -> "SeniorYieldTracker":
        # yield earned so far is locked in at the old rate
        return self.accrue(timestamp, old_yield_bps)
