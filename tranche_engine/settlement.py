"""
Pool-level settlement: runs the waterfalls in order against one pool's state.

Every function takes the current PoolState and returns a new one; nothing is
mutated. Calls against the same pool must be made one at a time and in
chronological order, because profit, loss and recovery do not commute.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .config import PoolConfig
from .exceptions import CapacityExceededError, InvalidAmountError
from .fees import distribute_fees
from .first_loss_cover import add_profit, deposit_capacity, payout_yield, split_junior_profit
from .fixed_point import require_amount
from .models import (
    JUNIOR,
    SENIOR,
    FirstLossCoverState,
    PoolEvent,
    PoolState,
    SettlementResult,
    TrancheAssets,
)
from .senior_yield import SeniorYieldTracker
from .waterfall import distribute_loss, distribute_recovery

logger = logging.getLogger(__name__)

PROFIT = "profit"
LOSS = "loss"
RECOVERY = "recovery"
ACCRUAL = "accrual"
DEPOSIT = "deposit"
WITHDRAW = "withdraw"
COVER_DEPOSIT = "cover_deposit"
PAYOUT = "payout"
EVENT_KINDS = (PROFIT, LOSS, RECOVERY, ACCRUAL, DEPOSIT, WITHDRAW, COVER_DEPOSIT, PAYOUT)

Steps = List[Dict[str, object]]


def _step(steps: Steps, name: str, amount: int) -> None:
    steps.append({"step": name, "amount": amount})


def open_pool(
    config: PoolConfig,
    timestamp: int,
    senior: int = 0,
    junior: int = 0,
    cover_assets: Optional[Sequence[int]] = None,
) -> PoolState:
    if cover_assets is None:
        cover_assets = [0] * len(config.first_loss_covers)
    cover_assets = list(cover_assets)
    if len(cover_assets) != len(config.first_loss_covers):
        raise ValueError(
            f"Expected {len(config.first_loss_covers)} first loss cover balances, got {len(cover_assets)}"
        )
    return PoolState(
        assets=TrancheAssets(senior=senior, junior=junior),
        tracker=SeniorYieldTracker.start(senior, timestamp),
        covers=tuple(FirstLossCoverState(cfg, asset) for cfg, asset in zip(config.first_loss_covers, cover_assets)),
    )


def _refresh_tracker(state: PoolState, config: PoolConfig, timestamp: int) -> PoolState:
    tracker = config.policy().refresh_tracker(state.tracker, timestamp, state.assets.senior)
    return replace(state, tracker=tracker)


def tranche_available_cap(state: PoolState, config: PoolConfig, tranche: str) -> Optional[int]:
    """How much more a tranche can take in deposits. None means uncapped."""
    total_cap = None
    if config.liquidity_cap is not None:
        total_cap = max(config.liquidity_cap - state.assets.total, 0)
    if tranche == JUNIOR:
        return total_cap
    if tranche == SENIOR:
        ratio_cap = max(state.assets.junior * config.max_senior_junior_ratio - state.assets.senior, 0)
        return ratio_cap if total_cap is None else min(ratio_cap, total_cap)
    raise ValueError(f"Unknown tranche: {tranche!r}")


# ---------------------------------------------------------------------------
# Profit / loss / recovery
# ---------------------------------------------------------------------------

def apply_profit(state: PoolState, config: PoolConfig, profit: int, timestamp: int) -> SettlementResult:
    require_amount(profit, "profit")
    steps: Steps = []

    # 1) Fees come off the top
    fees = distribute_fees(profit, config.fees)
    for name, amount in fees.as_steps().items():
        _step(steps, name, amount)

    policy = config.policy()
    if fees.profit_after_fees == 0:
        # nothing to split, but senior yield keeps accruing
        closing = _refresh_tracker(state, config, timestamp)
        return SettlementResult(timestamp, PROFIT, profit, state, closing, steps, fees_total=fees.total_fees)

    # 2) Senior / junior split under the pool's policy
    dist = policy.distribute_profit(fees.profit_after_fees, state.assets, timestamp, state.tracker)
    _step(steps, "Senior Profit", dist.senior_profit)

    # 3) Junior side shared with the first loss covers
    junior_final, cover_profits = split_junior_profit(dist.junior_profit, state.assets.junior, state.covers)
    for cover, cover_profit in zip(state.covers, cover_profits):
        _step(steps, f"First Loss Cover Profit: {cover.name}", cover_profit)
    _step(steps, "Junior Profit", junior_final)

    closing = replace(
        state,
        assets=TrancheAssets(senior=dist.new_assets.senior, junior=state.assets.junior + junior_final),
        tracker=dist.tracker,
        covers=tuple(add_profit(c, p) for c, p in zip(state.covers, cover_profits)),
    )
    return SettlementResult(timestamp, PROFIT, profit, state, closing, steps, fees_total=fees.total_fees)


def apply_loss(state: PoolState, config: PoolConfig, loss: int, timestamp: int) -> SettlementResult:
    require_amount(loss, "loss")
    steps: Steps = []
    # accrue on the pre-loss senior debt first
    before = _refresh_tracker(state, config, timestamp)

    dist = distribute_loss(loss, before.assets, before.covers)
    for cover, covered in zip(before.covers, dist.cover_losses):
        _step(steps, f"First Loss Cover Loss: {cover.name}", covered)
    _step(steps, "Junior Loss", dist.losses.junior_loss)
    _step(steps, "Senior Loss", dist.losses.senior_loss)
    if dist.uncovered_loss:
        _step(steps, "Uncovered Loss", dist.uncovered_loss)

    closing = replace(
        before,
        assets=dist.new_assets,
        losses=before.losses + dist.losses,
        covers=dist.covers,
    )
    closing = _refresh_tracker(closing, config, timestamp)
    return SettlementResult(
        timestamp, LOSS, loss, state, closing, steps, uncovered_loss=dist.uncovered_loss
    )


def apply_recovery(state: PoolState, config: PoolConfig, recovery: int, timestamp: int) -> SettlementResult:
    require_amount(recovery, "recovery")
    steps: Steps = []
    before = _refresh_tracker(state, config, timestamp)

    dist = distribute_recovery(recovery, before.assets, before.losses, before.covers)
    _step(steps, "Senior Recovery", dist.senior_recovery)
    _step(steps, "Junior Recovery", dist.junior_recovery)
    for cover, recovered in reversed(list(zip(before.covers, dist.cover_recoveries))):
        _step(steps, f"First Loss Cover Recovery: {cover.name}", recovered)
    if dist.remaining_recovery:
        _step(steps, "Remaining Recovery (unallocated)", dist.remaining_recovery)

    closing = replace(before, assets=dist.new_assets, losses=dist.new_losses, covers=dist.covers)
    closing = _refresh_tracker(closing, config, timestamp)
    return SettlementResult(
        timestamp, RECOVERY, recovery, state, closing, steps, remaining_recovery=dist.remaining_recovery
    )


def settle(
    state: PoolState,
    config: PoolConfig,
    timestamp: int,
    profit: int = 0,
    loss: int = 0,
    recovery: int = 0,
) -> List[SettlementResult]:
    """
    One settlement period: profit, then loss, then recovery. Zero amounts are
    skipped; if all three are zero the senior yield still accrues.
    Returns one result per step applied; the last result's closing is the new state.
    """
    results: List[SettlementResult] = []
    for kind, amount, fn in (
        (PROFIT, profit, apply_profit),
        (LOSS, loss, apply_loss),
        (RECOVERY, recovery, apply_recovery),
    ):
        if amount:
            res = fn(state, config, amount, timestamp)
            results.append(res)
            state = res.closing
    if not results:
        results.append(accrue(state, config, timestamp))
    return results


def accrue(state: PoolState, config: PoolConfig, timestamp: int) -> SettlementResult:
    closing = _refresh_tracker(state, config, timestamp)
    return SettlementResult(timestamp, ACCRUAL, 0, state, closing)


# ---------------------------------------------------------------------------
# Capital movements
# ---------------------------------------------------------------------------

def deposit(state: PoolState, config: PoolConfig, tranche: str, amount: int, timestamp: int) -> SettlementResult:
    require_amount(amount, "deposit")
    available = tranche_available_cap(state, config, tranche)
    if available is not None and amount > available:
        raise CapacityExceededError(f"{tranche} tranche", amount, available)

    before = _refresh_tracker(state, config, timestamp)
    assets = before.assets.with_tranche(tranche, before.assets.of(tranche) + amount)
    closing = _refresh_tracker(replace(before, assets=assets), config, timestamp)
    steps: Steps = []
    _step(steps, f"Deposit: {tranche}", amount)
    return SettlementResult(timestamp, DEPOSIT, amount, state, closing, steps)


def withdraw(state: PoolState, config: PoolConfig, tranche: str, amount: int, timestamp: int) -> SettlementResult:
    require_amount(amount, "withdrawal")
    held = state.assets.of(tranche)
    if amount > held:
        raise InvalidAmountError("withdrawal", amount, f"exceeds {tranche} tranche assets of {held}")

    before = _refresh_tracker(state, config, timestamp)
    assets = before.assets.with_tranche(tranche, held - amount)
    closing = _refresh_tracker(replace(before, assets=assets), config, timestamp)
    steps: Steps = []
    _step(steps, f"Withdrawal: {tranche}", amount)
    return SettlementResult(timestamp, WITHDRAW, amount, state, closing, steps)


def deposit_cover(state: PoolState, config: PoolConfig, name: str, amount: int, timestamp: int) -> SettlementResult:
    require_amount(amount, "cover deposit")
    idx = config.cover_index(name)
    cover = state.covers[idx]
    available = deposit_capacity(cover)
    if available is not None and amount > available:
        raise CapacityExceededError(f"first loss cover {name}", amount, available)

    covers = list(state.covers)
    covers[idx] = replace(cover, asset=cover.asset + amount)
    closing = replace(state, covers=tuple(covers))
    steps: Steps = []
    _step(steps, f"Cover Deposit: {name}", amount)
    return SettlementResult(timestamp, COVER_DEPOSIT, amount, state, closing, steps)


def payout_cover_yield(
    state: PoolState, config: PoolConfig, timestamp: int, name: Optional[str] = None
) -> SettlementResult:
    """Pays out every cover's assets above its liquidity cap (or just the named cover's)."""
    targets = range(len(state.covers)) if name is None else [config.cover_index(name)]
    covers = list(state.covers)
    steps: Steps = []
    total = 0
    for i in targets:
        covers[i], paid = payout_yield(covers[i])
        _step(steps, f"Yield Payout: {covers[i].name}", paid)
        total += paid
    closing = replace(state, covers=tuple(covers))
    return SettlementResult(timestamp, PAYOUT, total, state, closing, steps, cover_payouts=total)


# ---------------------------------------------------------------------------
# Event replay
# ---------------------------------------------------------------------------

def apply_event(state: PoolState, config: PoolConfig, event: PoolEvent) -> SettlementResult:
    ts = event.timestamp
    handlers: Dict[str, Callable[[], SettlementResult]] = {
        PROFIT: lambda: apply_profit(state, config, event.amount, ts),
        LOSS: lambda: apply_loss(state, config, event.amount, ts),
        RECOVERY: lambda: apply_recovery(state, config, event.amount, ts),
        ACCRUAL: lambda: accrue(state, config, ts),
        DEPOSIT: lambda: deposit(state, config, _require_target(event), event.amount, ts),
        WITHDRAW: lambda: withdraw(state, config, _require_target(event), event.amount, ts),
        COVER_DEPOSIT: lambda: deposit_cover(state, config, _require_target(event), event.amount, ts),
        PAYOUT: lambda: payout_cover_yield(state, config, ts, event.target),
    }
    if event.kind not in handlers:
        raise ValueError(f"Unknown event kind: {event.kind!r}. Expected one of {EVENT_KINDS}")
    res = handlers[event.kind]()

    logger.info(
        "%s %d at %d -> senior %d, junior %d, covers %s",
        event.kind, event.amount, ts,
        res.closing.assets.senior, res.closing.assets.junior,
        [c.asset for c in res.closing.covers],
    )
    return res


def _require_target(event: PoolEvent) -> str:
    if not event.target:
        raise ValueError(f"{event.kind} event at {event.timestamp} needs a target")
    return event.target


def run_events(
    state: PoolState, config: PoolConfig, events: Iterable[PoolEvent]
) -> Tuple[PoolState, List[SettlementResult]]:
    """Replays events in timestamp order (stable for ties). Returns the final state and the journal."""
    journal: List[SettlementResult] = []
    for event in sorted(events, key=lambda e: e.timestamp):
        res = apply_event(state, config, event)
        journal.append(res)
        state = res.closing
    return state, journal
