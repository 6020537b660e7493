from __future__ import annotations

import os
from decimal import Decimal
from typing import Dict, Iterable

import pandas as pd
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

PACK_SHEETS = [
    "Pool Summary",
    "Event Ledger",
    "Tranche Rollforward",
    "First Loss Cover Rollforward",
    "Senior Yield Tracker",
    "Control Checks",
]

# identifiers and free-form values, never given a money format
_TEXT_COLUMNS = ("event", "Event", "Priority", "metric", "value")
AMOUNT_FORMAT = "#,##0.00####"
MAX_COLUMN_WIDTH = 60


def _safe_sheet_name(name: str) -> str:
    return str(name)[:31]


def _cell_value(val: object) -> object:
    if isinstance(val, Decimal):
        return val
    if hasattr(val, "item"):
        return val.item()  # numpy scalar -> python
    return val


def _is_amount(val: object) -> bool:
    return isinstance(val, (int, Decimal)) and not isinstance(val, bool)


def _column_width(values: Iterable[object]) -> int:
    longest = max((len(str(v)) for v in values if v is not None), default=0)
    return min(max(longest, 10), MAX_COLUMN_WIDTH) + 2


def _write_df(ws, df: pd.DataFrame, number_format: str = AMOUNT_FORMAT) -> None:
    """Writes df at A1 with a bold header row; amount cells get number_format."""
    bold = Font(bold=True)
    top = Alignment(vertical="top")
    columns = [str(c) for c in df.columns]

    ws.append(columns)
    for cell in ws[1]:
        cell.font = bold
        cell.alignment = top

    for row in df.itertuples(index=False, name=None):
        ws.append([_cell_value(v) for v in row])

    for j, col_name in enumerate(columns, start=1):
        cells = [ws.cell(row=r, column=j) for r in range(1, len(df) + 2)]
        for cell in cells[1:]:
            cell.alignment = top
            if col_name not in _TEXT_COLUMNS and _is_amount(cell.value):
                cell.number_format = number_format
        ws.column_dimensions[get_column_letter(j)].width = _column_width(c.value for c in cells)


def ensure_template(path: str) -> None:
    """Creates an empty settlement-pack template with one sheet per report, unless one already exists."""
    if os.path.exists(path):
        return
    wb = Workbook()
    wb.remove(wb.active)
    for name in PACK_SHEETS:
        wb.create_sheet(_safe_sheet_name(name))
    wb.save(path)


def write_settlement_pack(
    template_path: str,
    output_path: str,
    dfs: Dict[str, pd.DataFrame],
) -> None:
    wb = load_workbook(template_path)

    for sheet_name, df in dfs.items():
        safe = _safe_sheet_name(sheet_name)
        if safe in wb.sheetnames:
            idx = wb.sheetnames.index(safe)
            wb.remove(wb[safe])
            ws = wb.create_sheet(safe, idx)
        else:
            ws = wb.create_sheet(safe)
        _write_df(ws, df)
        ws.freeze_panes = "A2"

    wb.save(output_path)
