from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

import pandas as pd
from dateutil import parser as dtparser

from .config import PoolConfig
from .exceptions import InputError, InvalidAmountError
from .fees import FeeSchedule
from .fixed_point import DEFAULT_DECIMALS, to_amount
from .models import JUNIOR, SENIOR, TRANCHES, FirstLossCoverConfig, PoolEvent, PoolState, TrancheLosses
from .pool_calendar import PayPeriodDuration, to_timestamp
from .settlement import COVER_DEPOSIT, DEPOSIT, EVENT_KINDS, PAYOUT, WITHDRAW, open_pool

logger = logging.getLogger(__name__)

_FEE_FIELDS = {
    "protocol_fee": "protocol_fee_bps",
    "pool_owner_reward": "pool_owner_reward_bps",
    "ea_reward": "ea_reward_bps",
}


def _read_table(path: str, sheet: str) -> pd.DataFrame:
    return pd.read_excel(path, sheet_name=sheet, dtype=object)


def _require_columns(df: pd.DataFrame, sheet: str, required: set) -> None:
    if not required.issubset(df.columns):
        raise InputError(f"{sheet} sheet must include columns: {sorted(required)}")


def _is_blank(v: object) -> bool:
    if v is None:
        return True
    try:
        if pd.isna(v):
            return True
    except (TypeError, ValueError):
        pass
    return str(v).strip() in ("", "nan", "None")


def _to_int(v: object, name: str) -> int:
    # bps and ratios are whole numbers; 0 decimals rejects anything fractional
    try:
        return to_amount(v, 0, name)
    except InvalidAmountError as e:
        raise InputError(str(e)) from e


def _money(v: object, decimals: int, name: str) -> int:
    try:
        return to_amount(v, decimals, name)
    except InvalidAmountError as e:
        raise InputError(str(e)) from e


def _event_target(row: int, kind: str, raw: object, config: PoolConfig) -> Optional[str]:
    """Validates an Events row's kind and target; tranche names are case-insensitive, cover names are not."""
    if kind not in EVENT_KINDS:
        raise InputError(f"Events row {row}: unknown kind {kind!r}. Expected one of {EVENT_KINDS}")
    target = None if _is_blank(raw) else str(raw).strip()
    if kind in (DEPOSIT, WITHDRAW):
        if target is None or target.lower() not in TRANCHES:
            raise InputError(f"Events row {row}: {kind} needs a tranche target in {TRANCHES}, got {target!r}")
        return target.lower()
    if kind == COVER_DEPOSIT or (kind == PAYOUT and target is not None):
        if target not in config.cover_names():
            raise InputError(
                f"Events row {row}: {kind} target must be a first loss cover in {config.cover_names()}, got {target!r}"
            )
    return target


def parse_timestamp(v: object) -> int:
    try:
        return to_timestamp(dtparser.parse(str(v)))
    except (ValueError, OverflowError) as e:
        raise InputError(f"Cannot parse date: {v!r}") from e


def read_pool_inputs(excel_path: str) -> Tuple[PoolConfig, PoolState, List[PoolEvent]]:
    """
    Expected sheets:
      - Pool (key/value table)
      - Fees (fee_name, bps) with fee_name in protocol_fee, pool_owner_reward, ea_reward
      - Tranches (name, opening_assets, [optional: outstanding_loss]) for senior and junior
      - FirstLossCovers (name, cover_rate_per_loss_bps, cover_cap_per_loss,
        risk_yield_multiplier_bps, opening_asset, [optional: min_liquidity, max_liquidity,
        covered_loss]); row order is loss absorption order
      - Events (date, kind, amount, [optional: target])
    Amounts are human decimals and are converted to fixed-point at amount_decimals.
    """
    pool_df = _read_table(excel_path, "Pool")
    if set(pool_df.columns) != {"key", "value"}:
        raise InputError("Pool sheet must have columns: key, value")
    kv: Dict[str, object] = {
        str(k).strip(): v for k, v in zip(pool_df["key"], pool_df["value"]) if not _is_blank(k)
    }
    for key in ("tranches_policy", "opening_date"):
        if key not in kv:
            raise InputError(f"Pool sheet is missing key: {key}")

    raw_decimals = kv.get("amount_decimals")
    decimals = DEFAULT_DECIMALS if _is_blank(raw_decimals) else _to_int(raw_decimals, "amount_decimals")

    def opt_int(key: str, default: int) -> int:
        v = kv.get(key)
        return default if _is_blank(v) else _to_int(v, key)

    liquidity_cap: Optional[int] = None
    if not _is_blank(kv.get("liquidity_cap")):
        liquidity_cap = _money(kv["liquidity_cap"], decimals, "liquidity_cap")

    # Fees
    fees_df = _read_table(excel_path, "Fees")
    _require_columns(fees_df, "Fees", {"fee_name", "bps"})
    fee_kwargs: Dict[str, int] = {}
    for _, r in fees_df.iterrows():
        fee_name = str(r["fee_name"]).strip()
        if fee_name not in _FEE_FIELDS:
            raise InputError(f"Unknown fee: {fee_name!r}. Expected one of {sorted(_FEE_FIELDS)}")
        fee_kwargs[_FEE_FIELDS[fee_name]] = _to_int(r["bps"], fee_name)

    # First loss covers
    flc_df = _read_table(excel_path, "FirstLossCovers")
    _require_columns(
        flc_df,
        "FirstLossCovers",
        {"name", "cover_rate_per_loss_bps", "cover_cap_per_loss", "risk_yield_multiplier_bps", "opening_asset"},
    )
    cover_configs: List[FirstLossCoverConfig] = []
    cover_assets: List[int] = []
    covered_losses: List[int] = []
    for _, r in flc_df.iterrows():
        name = str(r["name"]).strip()
        max_liq = r.get("max_liquidity")
        cover_configs.append(
            FirstLossCoverConfig(
                name=name,
                cover_rate_per_loss_bps=_to_int(r["cover_rate_per_loss_bps"], f"{name} cover_rate_per_loss_bps"),
                cover_cap_per_loss=_money(r["cover_cap_per_loss"], decimals, f"{name} cover_cap_per_loss"),
                risk_yield_multiplier_bps=_to_int(r["risk_yield_multiplier_bps"], f"{name} risk_yield_multiplier_bps"),
                min_liquidity=0 if _is_blank(r.get("min_liquidity")) else _money(r["min_liquidity"], decimals, f"{name} min_liquidity"),
                max_liquidity=None if _is_blank(max_liq) else _money(max_liq, decimals, f"{name} max_liquidity"),
            )
        )
        cover_assets.append(_money(r["opening_asset"], decimals, f"{name} opening_asset"))
        covered = r.get("covered_loss")
        covered_losses.append(0 if _is_blank(covered) else _money(covered, decimals, f"{name} covered_loss"))

    try:
        config = PoolConfig(
            tranches_policy=str(kv["tranches_policy"]).strip(),
            fixed_senior_yield_bps=opt_int("fixed_senior_yield_bps", 0),
            tranches_risk_adjustment_bps=opt_int("tranches_risk_adjustment_bps", 0),
            liquidity_cap=liquidity_cap,
            max_senior_junior_ratio=opt_int("max_senior_junior_ratio", 4),
            pay_period_duration=(
                PayPeriodDuration.MONTHLY if _is_blank(kv.get("pay_period_duration"))
                else PayPeriodDuration.parse(kv["pay_period_duration"])
            ),
            amount_decimals=decimals,
            fees=FeeSchedule(**fee_kwargs),
            first_loss_covers=tuple(cover_configs),
        )
    except ValueError as e:
        raise InputError(f"Invalid pool configuration: {e}") from e

    # Tranches
    tr_df = _read_table(excel_path, "Tranches")
    _require_columns(tr_df, "Tranches", {"name", "opening_assets"})
    opening: Dict[str, int] = {}
    outstanding: Dict[str, int] = {SENIOR: 0, JUNIOR: 0}
    for _, r in tr_df.iterrows():
        name = str(r["name"]).strip().lower()
        if name not in (SENIOR, JUNIOR):
            raise InputError(f"Tranches sheet: unknown tranche {name!r}")
        opening[name] = _money(r["opening_assets"], decimals, f"{name} opening_assets")
        if not _is_blank(r.get("outstanding_loss")):
            outstanding[name] = _money(r["outstanding_loss"], decimals, f"{name} outstanding_loss")
    if set(opening) != {SENIOR, JUNIOR}:
        raise InputError("Tranches sheet must have one senior row and one junior row")

    opening_ts = parse_timestamp(kv["opening_date"])
    state = open_pool(config, opening_ts, senior=opening[SENIOR], junior=opening[JUNIOR], cover_assets=cover_assets)
    state = replace(
        state,
        losses=TrancheLosses(senior_loss=outstanding[SENIOR], junior_loss=outstanding[JUNIOR]),
        covers=tuple(replace(c, covered_loss=cl) for c, cl in zip(state.covers, covered_losses)),
    )
    if not _is_blank(kv.get("senior_unpaid_yield")):
        unpaid = _money(kv["senior_unpaid_yield"], decimals, "senior_unpaid_yield")
        state = replace(state, tracker=replace(state.tracker, unpaid_yield=unpaid))

    # Events
    ev_df = _read_table(excel_path, "Events")
    _require_columns(ev_df, "Events", {"date", "kind", "amount"})
    events: List[PoolEvent] = []
    for row, (_, r) in enumerate(ev_df.iterrows(), start=1):
        kind = str(r["kind"]).strip().lower()
        target = _event_target(row, kind, r.get("target"), config)
        events.append(
            PoolEvent(
                timestamp=parse_timestamp(r["date"]),
                kind=kind,
                amount=0 if _is_blank(r["amount"]) else _money(r["amount"], decimals, "event amount"),
                target=target,
            )
        )

    logger.info(
        "Loaded %s pool with %d first loss covers and %d events from %s",
        config.tranches_policy, len(cover_configs), len(events), excel_path,
    )
    return config, state, events
