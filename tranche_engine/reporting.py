from __future__ import annotations

from typing import List, Sequence

import pandas as pd

from .config import PoolConfig
from .first_loss_cover import is_sufficient
from .fixed_point import from_amount
from .models import PoolState, SettlementResult
from .pool_calendar import start_date_of_period, to_datetime


def _date(ts: int) -> str:
    return to_datetime(ts).strftime("%Y-%m-%d")


def build_event_ledger(cfg: PoolConfig, journal: Sequence[SettlementResult]) -> pd.DataFrame:
    """One row per allocation step, in the order the waterfall applied them."""
    d = cfg.amount_decimals
    rows = []
    for n, res in enumerate(journal, start=1):
        period = _date(start_date_of_period(cfg.pay_period_duration, res.timestamp))
        if not res.steps:
            rows.append({
                "event": n, "date": _date(res.timestamp), "period start": period,
                "kind": res.kind, "step": "(no allocation)", "amount": from_amount(0, d),
            })
        for s in res.steps:
            rows.append({
                "event": n,
                "date": _date(res.timestamp),
                "period start": period,
                "kind": res.kind,
                "step": s["step"],
                "amount": from_amount(int(s["amount"]), d),
            })
    return pd.DataFrame(rows, columns=["event", "date", "period start", "kind", "step", "amount"])


def build_tranche_rollforward(cfg: PoolConfig, opening: PoolState, journal: Sequence[SettlementResult]) -> pd.DataFrame:
    d = cfg.amount_decimals
    closing = journal[-1].closing if journal else opening
    rows = []
    for tranche in ("senior", "junior"):
        moves = {"profit": 0, "loss": 0, "recovery": 0, "deposit": 0, "withdraw": 0}
        for res in journal:
            delta = res.closing.assets.of(tranche) - res.opening.assets.of(tranche)
            if res.kind in moves:
                moves[res.kind] += delta
        rows.append({
            "Tranche": tranche.title(),
            "Opening Assets": from_amount(opening.assets.of(tranche), d),
            "Profit": from_amount(moves["profit"], d),
            "Loss": from_amount(-moves["loss"], d),
            "Recovery": from_amount(moves["recovery"], d),
            "Deposits": from_amount(moves["deposit"], d),
            "Withdrawals": from_amount(-moves["withdraw"], d),
            "Closing Assets": from_amount(closing.assets.of(tranche), d),
            "Outstanding Loss (Closing)": from_amount(
                closing.losses.senior_loss if tranche == "senior" else closing.losses.junior_loss, d
            ),
        })
    return pd.DataFrame(rows)


def build_cover_rollforward(cfg: PoolConfig, opening: PoolState, journal: Sequence[SettlementResult]) -> pd.DataFrame:
    d = cfg.amount_decimals
    closing = journal[-1].closing if journal else opening
    rows = []
    for i, cover in enumerate(opening.covers):
        moves = {"profit": 0, "loss": 0, "recovery": 0, "cover_deposit": 0, "payout": 0}
        for res in journal:
            if res.kind in moves:
                moves[res.kind] += res.closing.covers[i].asset - res.opening.covers[i].asset
        rows.append({
            "Priority": i + 1,
            "First Loss Cover": cover.name,
            "Opening Assets": from_amount(cover.asset, d),
            "Profit": from_amount(moves["profit"], d),
            "Loss Covered": from_amount(-moves["loss"], d),
            "Recovered": from_amount(moves["recovery"], d),
            "Deposits": from_amount(moves["cover_deposit"], d),
            "Yield Paid Out": from_amount(-moves["payout"], d),
            "Closing Assets": from_amount(closing.covers[i].asset, d),
            "Min Liquidity": from_amount(cover.config.min_liquidity, d),
            "Covered Loss (Closing)": from_amount(closing.covers[i].covered_loss, d),
            "Sufficient": "YES" if is_sufficient(closing.covers[i]) else "NO",
        })
    return pd.DataFrame(rows)


def build_yield_tracker_history(cfg: PoolConfig, journal: Sequence[SettlementResult]) -> pd.DataFrame:
    d = cfg.amount_decimals
    rows = []
    for n, res in enumerate(journal, start=1):
        t = res.closing.tracker
        rows.append({
            "event": n,
            "date": _date(res.timestamp),
            "kind": res.kind,
            "Senior Debt": from_amount(t.senior_debt, d),
            "Unpaid Yield": from_amount(t.unpaid_yield, d),
            "Last Updated": _date(t.last_updated_date) if t.last_updated_date else "",
        })
    return pd.DataFrame(rows, columns=["event", "date", "kind", "Senior Debt", "Unpaid Yield", "Last Updated"])


def build_pool_summary(cfg: PoolConfig, opening: PoolState, journal: Sequence[SettlementResult]) -> pd.DataFrame:
    d = cfg.amount_decimals
    closing = journal[-1].closing if journal else opening

    def total(kind: str) -> int:
        return sum(r.amount for r in journal if r.kind == kind)

    rows: List[dict] = [
        {"metric": "Tranches Policy", "value": cfg.tranches_policy},
        {"metric": "Events Settled", "value": len(journal)},
        {"metric": "Gross Profit", "value": from_amount(total("profit"), d)},
        {"metric": "Fees", "value": from_amount(sum(r.fees_total for r in journal), d)},
        {"metric": "Loss", "value": from_amount(total("loss"), d)},
        {"metric": "Recovery", "value": from_amount(total("recovery"), d)},
        {"metric": "Uncovered Loss", "value": from_amount(sum(r.uncovered_loss for r in journal), d)},
        {"metric": "Unallocated Recovery", "value": from_amount(sum(r.remaining_recovery for r in journal), d)},
        {"metric": "Cover Yield Paid Out", "value": from_amount(sum(r.cover_payouts for r in journal), d)},
        {"metric": "Senior Assets (Closing)", "value": from_amount(closing.assets.senior, d)},
        {"metric": "Junior Assets (Closing)", "value": from_amount(closing.assets.junior, d)},
        {"metric": "First Loss Cover Assets (Closing)", "value": from_amount(closing.cover_assets, d)},
        {"metric": "Senior Unpaid Yield (Closing)", "value": from_amount(closing.tracker.unpaid_yield, d)},
        {"metric": "Capital Stack Exhausted", "value": str(any(r.uncovered_loss for r in journal))},
    ]
    return pd.DataFrame(rows)
