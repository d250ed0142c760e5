"""
Load the interview tracker as headers + rows.

Two sources:
- a CSV export (pandas)
- a Google Sheet tab read with a service account (gspread)

Both return the same shape: {"headers": [...], "rows": [{header: value}, ...]}
with headers and cells trimmed. Cell text is kept verbatim, so "NA" stays "NA"
and is never turned into a missing value.
"""

from __future__ import annotations

import importlib
import json
import logging
import os
from datetime import datetime, timezone

import pandas as pd

logger = logging.getLogger("recruitment_funnel.source")


def trim_value(value):
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (bool, int, float)):
        return value
    return str(value).strip()


def table_from_values(values: list[list], sheet_name: str | None = None) -> dict:
    """First row is headers; later rows become dicts, short rows padded with ""."""
    if not values:
        raise ValueError(f"The sheet is empty{f': {sheet_name}' if sheet_name else ''}")

    headers = [str(trim_value(h)) for h in values[0]]
    rows = []
    for raw in values[1:]:
        cells = [trim_value(c) for c in raw]
        rows.append({h: (cells[i] if i < len(cells) else "") for i, h in enumerate(headers)})

    return {
        "headers": headers,
        "rows": rows,
        "row_count": len(rows),
        "sheet_name": sheet_name or "",
        "fetched_at": datetime.now(timezone.utc).isoformat(),
    }


def load_csv_table(path: str) -> dict:
    df = pd.read_csv(path, dtype=str, keep_default_na=False, low_memory=False)
    values = [df.columns.tolist()] + df.values.tolist()
    table = table_from_values(values, sheet_name=os.path.basename(path))
    logger.info(f"Loaded {table['row_count']:,} rows x {len(table['headers'])} columns from {path}")
    return table


def load_gspread_client():
    try:
        gspread = importlib.import_module("gspread")
    except ImportError as exc:
        raise ImportError("gspread is required for Google Sheets access. Run: pip install gspread") from exc

    creds = os.environ.get("GOOGLE_SHEETS_CREDENTIALS")
    if not creds:
        raise ValueError("GOOGLE_SHEETS_CREDENTIALS is required for Google Sheets access.")
    if os.path.isfile(creds):
        return gspread.service_account(filename=creds)
    info = json.loads(creds)
    return gspread.service_account_from_dict(info)


def load_sheet_table(sheet_id: str, worksheet: str | None = None, client=None) -> dict:
    if not sheet_id or not sheet_id.strip():
        raise ValueError("A Google Sheet ID is required (--sheet-id or FUNNEL_SHEET_ID).")

    gc = client or load_gspread_client()
    sh = gc.open_by_key(sheet_id.strip())
    worksheets = sh.worksheets()
    if worksheet:
        ws = next((w for w in worksheets if w.title == worksheet), None)
    else:
        ws = worksheets[0] if worksheets else None
    if ws is None:
        raise ValueError(f"Sheet not found: {worksheet or 'first worksheet'}")

    table = table_from_values(ws.get_all_values(), sheet_name=ws.title)
    logger.info(f"Loaded {table['row_count']:,} rows x {len(table['headers'])} columns from sheet tab '{ws.title}'")
    return table


def table_stats(headers: list[str], rows: list[dict]) -> list[dict]:
    """Row/column counts plus averages of mostly-numeric columns, at most 4 entries."""
    stats = [
        {"label": "Total Rows", "value": f"{len(rows):,}"},
        {"label": "Total Columns", "value": f"{len(headers):,}"},
    ]
    if not rows:
        return stats

    df = pd.DataFrame(rows, columns=headers)
    for header in headers:
        numeric = pd.to_numeric(df[header], errors="coerce").dropna()
        if len(numeric) <= len(df) * 0.5:
            continue
        total = float(numeric.sum())
        if total != 0:
            stats.append({"label": f"Avg {header}", "value": f"{numeric.mean():.2f}"})
    return stats[:4]
