from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .fixed_point import BP_FACTOR, apply_bps, require_amount, require_bps


@dataclass(frozen=True)
class FeeSchedule:
    protocol_fee_bps: int = 0
    pool_owner_reward_bps: int = 0
    ea_reward_bps: int = 0

    def __post_init__(self):
        require_bps(self.protocol_fee_bps, "protocol fee")
        require_bps(self.pool_owner_reward_bps, "pool owner reward")
        require_bps(self.ea_reward_bps, "evaluation agent reward")
        if self.total_bps > BP_FACTOR:
            raise ValueError(f"fees add up to {self.total_bps} bps, more than 100%")

    @property
    def total_bps(self) -> int:
        return self.protocol_fee_bps + self.pool_owner_reward_bps + self.ea_reward_bps


@dataclass(frozen=True)
class FeeDistribution:
    protocol_fee: int
    pool_owner_reward: int
    ea_reward: int
    profit_after_fees: int

    @property
    def total_fees(self) -> int:
        return self.protocol_fee + self.pool_owner_reward + self.ea_reward

    def as_steps(self) -> Dict[str, int]:
        return {
            "Fee: Protocol": self.protocol_fee,
            "Fee: Pool Owner Reward": self.pool_owner_reward,
            "Fee: Evaluation Agent Reward": self.ea_reward,
        }


def distribute_fees(profit: int, schedule: FeeSchedule) -> FeeDistribution:
    """Takes each fee off gross profit; whatever is left goes down the tranche waterfall."""
    require_amount(profit, "profit")
    protocol_fee = apply_bps(profit, schedule.protocol_fee_bps)
    pool_owner_reward = apply_bps(profit, schedule.pool_owner_reward_bps)
    ea_reward = apply_bps(profit, schedule.ea_reward_bps)
    return FeeDistribution(
        protocol_fee=protocol_fee,
        pool_owner_reward=pool_owner_reward,
        ea_reward=ea_reward,
        profit_after_fees=profit - protocol_fee - pool_owner_reward - ea_reward,
    )


def profit_after_fees(profit: int, schedule: FeeSchedule) -> int:
    return distribute_fees(profit, schedule).profit_after_fees
