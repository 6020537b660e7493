from __future__ import annotations

import logging
from typing import Dict, Optional

import pandas as pd

from .excel_writer import ensure_template, write_settlement_pack
from .inputs import read_pool_inputs
from .reconciliation import build_control_checks
from .reporting import (
    build_cover_rollforward,
    build_event_ledger,
    build_pool_summary,
    build_tranche_rollforward,
    build_yield_tracker_history,
)
from .settlement import run_events

logger = logging.getLogger(__name__)


def run_settlement_engine(
    input_xlsx: str,
    template_xlsx: str,
    output_xlsx: str,
    extra_sheets: Optional[Dict[str, pd.DataFrame]] = None,
) -> Dict[str, pd.DataFrame]:
    """
    End-to-end engine run:
      - Reads the pool workbook (Pool/Fees/Tranches/FirstLossCovers/Events)
      - Replays every event through the profit, loss and recovery waterfalls
      - Builds the report tables and control checks
      - Writes the settlement pack into output_xlsx (from template_xlsx)
      - Returns the DataFrames
    """
    ensure_template(template_xlsx)

    cfg, opening, events = read_pool_inputs(input_xlsx)
    _, journal = run_events(opening, cfg, events)

    checks = build_control_checks(cfg, journal)
    failed = int((checks["Status"] == "FAIL").sum()) if not checks.empty else 0
    if failed:
        logger.error("%d control checks failed", failed)

    dfs = {
        "Pool Summary": build_pool_summary(cfg, opening, journal),
        "Event Ledger": build_event_ledger(cfg, journal),
        "Tranche Rollforward": build_tranche_rollforward(cfg, opening, journal),
        "First Loss Cover Rollforward": build_cover_rollforward(cfg, opening, journal),
        "Senior Yield Tracker": build_yield_tracker_history(cfg, journal),
        "Control Checks": checks,
    }

    if extra_sheets:
        dfs.update(extra_sheets)

    write_settlement_pack(template_xlsx, output_xlsx, dfs)
    logger.info("Wrote settlement pack: %s", output_xlsx)
    return dfs
