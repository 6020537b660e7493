from __future__ import annotations

import argparse
from typing import Dict

import pandas as pd


def build_sample_frames() -> Dict[str, pd.DataFrame]:
    pool = pd.DataFrame(
        [
            {"key": "tranches_policy", "value": "fixed_senior_yield"},
            {"key": "fixed_senior_yield_bps", "value": 1000},
            {"key": "tranches_risk_adjustment_bps", "value": 0},
            {"key": "liquidity_cap", "value": "5000000"},
            {"key": "max_senior_junior_ratio", "value": 4},
            {"key": "pay_period_duration", "value": "monthly"},
            {"key": "amount_decimals", "value": 6},
            {"key": "opening_date", "value": "2026-01-01"},
        ]
    )

    fees = pd.DataFrame(
        [
            {"fee_name": "protocol_fee", "bps": 100},
            {"fee_name": "pool_owner_reward", "bps": 200},
            {"fee_name": "ea_reward", "bps": 100},
        ]
    )

    tranches = pd.DataFrame(
        [
            {"name": "senior", "opening_assets": "300000", "outstanding_loss": "0"},
            {"name": "junior", "opening_assets": "100000", "outstanding_loss": "0"},
        ]
    )

    covers = pd.DataFrame(
        [
            {"name": "borrower", "cover_rate_per_loss_bps": 10000, "cover_cap_per_loss": "10000",
             "risk_yield_multiplier_bps": 0, "min_liquidity": "0", "max_liquidity": "",
             "opening_asset": "10000"},
            {"name": "admin", "cover_rate_per_loss_bps": 5000, "cover_cap_per_loss": "20000",
             "risk_yield_multiplier_bps": 20000, "min_liquidity": "10000", "max_liquidity": "60000",
             "opening_asset": "50000"},
        ]
    )

    events = pd.DataFrame(
        [
            {"date": "2026-01-31", "kind": "profit", "amount": "4000", "target": ""},
            {"date": "2026-02-10", "kind": "deposit", "amount": "25000", "target": "junior"},
            {"date": "2026-02-28", "kind": "loss", "amount": "45000", "target": ""},
            {"date": "2026-03-15", "kind": "recovery", "amount": "12500", "target": ""},
            {"date": "2026-03-31", "kind": "profit", "amount": "6125.75", "target": ""},
            {"date": "2026-03-31", "kind": "payout", "amount": "0", "target": ""},
        ]
    )

    return {
        "Pool": pool,
        "Fees": fees,
        "Tranches": tranches,
        "FirstLossCovers": covers,
        "Events": events,
    }


def write_sample_input(path: str) -> None:
    with pd.ExcelWriter(path) as xw:
        for sheet, df in build_sample_frames().items():
            df.to_excel(xw, sheet_name=sheet, index=False)


def main():
    p = argparse.ArgumentParser(description="Write a sample pool workbook for the settlement engine.")
    p.add_argument("--out", default="sample_pool.xlsx", help="Output Excel path")
    args = p.parse_args()

    write_sample_input(args.out)
    print(f"Created {args.out}")


if __name__ == "__main__":
    main()
