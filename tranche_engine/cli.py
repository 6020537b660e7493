from __future__ import annotations

import argparse
import logging

from .runner import run_settlement_engine


def main():
    p = argparse.ArgumentParser(description="Tranche Profit / Loss / Recovery Waterfall Engine")
    p.add_argument("--input", required=True, help="Input Excel file (Pool, Fees, Tranches, FirstLossCovers, Events sheets)")
    p.add_argument("--template", required=True, help="Excel template path (will be created if missing)")
    p.add_argument("--output", required=True, help="Output settlement pack path")
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    args = p.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    dfs = run_settlement_engine(args.input, args.template, args.output)

    checks = dfs["Control Checks"]
    failed = int((checks["Status"] == "FAIL").sum()) if not checks.empty else 0
    print(f"Wrote settlement pack: {args.output} ({len(checks)} control checks, {failed} failed)")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
