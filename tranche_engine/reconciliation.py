from __future__ import annotations

from typing import List, Optional, Sequence

import pandas as pd

from .config import PoolConfig
from .fixed_point import from_amount
from .models import PoolState, SettlementResult
from .settlement import ACCRUAL, COVER_DEPOSIT, DEPOSIT, LOSS, PAYOUT, PROFIT, RECOVERY, WITHDRAW
from .tranches_policy import FIXED_SENIOR_YIELD


def _outstanding(state: PoolState) -> int:
    return state.losses.total + sum(c.covered_loss for c in state.covers)


def _expected_capital_change(res: SettlementResult) -> Optional[int]:
    """How much capital (tranches + covers) the event should add (+) or remove (-)."""
    if res.kind == PROFIT:
        return res.amount - res.fees_total
    if res.kind == LOSS:
        return -(res.amount - res.uncovered_loss)
    if res.kind == RECOVERY:
        return res.amount - res.remaining_recovery
    if res.kind in (DEPOSIT, COVER_DEPOSIT):
        return res.amount
    if res.kind == WITHDRAW:
        return -res.amount
    if res.kind == PAYOUT:
        return -res.cover_payouts
    if res.kind == ACCRUAL:
        return 0
    return None


def _expected_outstanding_change(res: SettlementResult) -> int:
    if res.kind == LOSS:
        return res.amount - res.uncovered_loss
    if res.kind == RECOVERY:
        return -(res.amount - res.remaining_recovery)
    return 0


def build_control_checks(cfg: PoolConfig, journal: Sequence[SettlementResult]) -> pd.DataFrame:
    """
    Recomputes the conservation identities for every settled event.
    Every row should read PASS; a FAIL means value was created or destroyed.
    """
    d = cfg.amount_decimals
    rows: List[dict] = []

    def add(event: int, section: str, metric: str, expected: int, engine: int):
        diff = engine - expected
        rows.append({
            "Event": event,
            "Section": section,
            "Metric": metric,
            "Expected": from_amount(expected, d),
            "Engine": from_amount(engine, d),
            "Diff": from_amount(diff, d),
            "Status": "PASS" if diff == 0 else "FAIL",
        })

    for n, res in enumerate(journal, start=1):
        expected = _expected_capital_change(res)
        if expected is not None:
            add(n, "Conservation", f"Capital change ({res.kind})", expected,
                res.closing.total_capital - res.opening.total_capital)

        step_total = sum(int(s["amount"]) for s in res.steps)
        if res.kind in (PROFIT, LOSS, RECOVERY):
            add(n, "Allocation", f"Steps sum to {res.kind}", res.amount, step_total)

        add(n, "Loss Tracking", "Outstanding loss change", _expected_outstanding_change(res),
            _outstanding(res.closing) - _outstanding(res.opening))

        if cfg.tranches_policy == FIXED_SENIOR_YIELD:
            add(n, "Senior Yield", "Tracker debt matches senior assets",
                res.closing.assets.senior, res.closing.tracker.senior_debt)

    return pd.DataFrame(rows, columns=["Event", "Section", "Metric", "Expected", "Engine", "Diff", "Status"])
