"""
First loss covers: reserves that sit below the junior tranche.

They take losses before either tranche does, are repaid last on recovery,
and are compensated with a risk-weighted share of the junior tranche's profit.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from .fixed_point import BP_FACTOR, apply_bps, mul_div, require_amount
from .models import FirstLossCoverState

logger = logging.getLogger(__name__)


def available_cover(cover: FirstLossCoverState, loss: int) -> int:
    cfg = cover.config
    return min(apply_bps(loss, cfg.cover_rate_per_loss_bps), cfg.cover_cap_per_loss, cover.asset, loss)


def cover_loss(cover: FirstLossCoverState, loss: int) -> Tuple[FirstLossCoverState, int, int]:
    """Returns (new cover, amount covered, loss still remaining)."""
    require_amount(loss, "loss")
    covered = available_cover(cover, loss)
    if covered == 0:
        return cover, 0, loss
    new_cover = replace(cover, asset=cover.asset - covered, covered_loss=cover.covered_loss + covered)
    logger.debug("%s covered %d of loss %d", cover.name, covered, loss)
    return new_cover, covered, loss - covered


def recover_loss(cover: FirstLossCoverState, recovery: int) -> Tuple[FirstLossCoverState, int, int]:
    """Returns (new cover, amount recovered, recovery still remaining)."""
    require_amount(recovery, "recovery")
    recovered = min(cover.covered_loss, recovery)
    if recovered == 0:
        return cover, 0, recovery
    new_cover = replace(cover, asset=cover.asset + recovered, covered_loss=cover.covered_loss - recovered)
    logger.debug("%s recovered %d", cover.name, recovered)
    return new_cover, recovered, recovery - recovered


def add_profit(cover: FirstLossCoverState, profit: int) -> FirstLossCoverState:
    require_amount(profit, "profit")
    return replace(cover, asset=cover.asset + profit) if profit else cover


def deposit_capacity(cover: FirstLossCoverState) -> Optional[int]:
    """None when the cover has no liquidity cap."""
    cap = cover.config.max_liquidity
    if cap is None:
        return None
    return max(cap - cover.asset, 0)


def payout_yield(cover: FirstLossCoverState) -> Tuple[FirstLossCoverState, int]:
    """Anything above the cover's liquidity cap goes back to its providers as yield."""
    cap = cover.config.max_liquidity
    if cap is None or cover.asset <= cap:
        return cover, 0
    payout = cover.asset - cap
    logger.info("%s paying out %d of yield above its liquidity cap %d", cover.name, payout, cap)
    return replace(cover, asset=cap), payout


def is_sufficient(cover: FirstLossCoverState) -> bool:
    return cover.asset >= cover.config.min_liquidity


def risk_weighted_assets(cover: FirstLossCoverState) -> int:
    return mul_div(cover.asset, cover.config.risk_yield_multiplier_bps, BP_FACTOR)


def split_junior_profit(
    junior_profit_pool: int,
    junior_assets: int,
    covers: Sequence[FirstLossCoverState],
) -> Tuple[int, Tuple[int, ...]]:
    """
    Shares the junior side's profit between the junior tranche and each cover,
    in proportion to junior assets vs. each cover's risk-weighted assets.

    Every truncation remainder stays with the junior tranche, so
    ``junior_final + sum(cover_profits) == junior_profit_pool`` exactly.
    """
    require_amount(junior_profit_pool, "junior profit")
    require_amount(junior_assets, "junior assets")

    weights = [risk_weighted_assets(c) for c in covers]
    total_weight = junior_assets + sum(weights)
    if junior_profit_pool == 0 or total_weight == 0:
        return junior_profit_pool, tuple(0 for _ in covers)

    cover_profits: List[int] = [mul_div(junior_profit_pool, w, total_weight) for w in weights]
    junior_final = junior_profit_pool - sum(cover_profits)
    return junior_final, tuple(cover_profits)
