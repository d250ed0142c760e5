"""
Tabular views of a FunnelResult: summary, stage x outcome, vendor, technology,
experience and metric definitions. Each table is a DataFrame so it can be
written to CSV or pushed to a Google Sheet tab.
"""

from __future__ import annotations

import json
import logging
import os
from typing import cast

import pandas as pd

from funnel_analytics import GROUP_STAT_KEYS, FunnelResult
from funnel_stages import PIPELINE_STAGES
from funnel_values import EXPERIENCE_BRACKETS
from sheet_source import load_gspread_client

logger = logging.getLogger("recruitment_funnel.report")

STAGE_LABELS = {
    "rf": "Rapid Fire",
    "l1": "L1",
    "l2": "L2",
    "client": "Client Round",
    "offer": "Offer",
}

STAGE_COLUMNS = [
    ("reached", "Reached"),
    ("pending", "Pending"),
    ("selected", "Selected"),
    ("rejected", "Rejected"),
    ("dropped", "Dropped"),
    ("reschedule", "Reschedule"),
    ("to_be_scheduled", "To Be Scheduled"),
    ("feedback_pending", "Feedback Pending"),
    ("in_progress", "In Progress"),
]


def safe_rate(num: int, den: int) -> float:
    if den == 0:
        return 0.0
    return (num / den) * 100.0


def build_summary_table(result: FunnelResult) -> pd.DataFrame:
    c = result.counters
    screening_decided = c["screening_selected"] + c["screening_rejected"] + c["screening_hold"]
    screening_pass_rate = safe_rate(c["screening_selected"], screening_decided)

    rows = [
        ("Total Profiles", c["total_profiles"]),
        ("Interviews Scheduled", c["interviews_scheduled"]),
        ("Offers Released", c["total_offers"]),
        ("Onboarded", c["total_onboarded"]),
        ("Screening — Pending", c["screening_pending"]),
        ("Screening — Feedback Pending", c["screening_feedback_pending"]),
        ("Screening — Selected", c["screening_selected"]),
        ("Screening — Rejected", c["screening_rejected"]),
        ("Screening — Hold", c["screening_hold"]),
        ("Screening — No-show", c["screening_no_show"]),
        ("Screening Pass Rate", f"{screening_pass_rate:.1f}%"),
    ]
    for stage in PIPELINE_STAGES:
        label = STAGE_LABELS[stage]
        rate = safe_rate(c[f"{stage}_selected"], c[f"{stage}_selected"] + c[f"{stage}_rejected"])
        rows.append((f"{label} — Reached", c[f"{stage}_reached"]))
        rows.append((f"{label} — Pending", c[f"{stage}_pending"]))
        rows.append((f"{label} Pass Rate", f"{rate:.1f}%"))
    rows += [
        ("Offer — Pending", c["offer_pending"]),
        ("No-shows", c["no_show_count"]),
        ("Technical Rejections", c["technical_rejections"]),
        ("HR Rejections", c["hr_rejections"]),
        ("Unrecognized Screening Feedback", result.unrecognized_feedback),
    ]
    return pd.DataFrame({"Metric": [k for k, _ in rows], "Value": [v for _, v in rows]})


def build_stage_table(result: FunnelResult) -> pd.DataFrame:
    c = result.counters
    rows = []
    for stage in PIPELINE_STAGES:
        row = {"Stage": STAGE_LABELS[stage]}
        for key, label in STAGE_COLUMNS:
            row[label] = c[f"{stage}_{key}"]
        row["Pass Rate"] = round(safe_rate(c[f"{stage}_selected"], c[f"{stage}_selected"] + c[f"{stage}_rejected"]), 1)
        rows.append(row)
    offer_row = {"Stage": STAGE_LABELS["offer"]}
    for key, label in STAGE_COLUMNS:
        offer_row[label] = 0
    offer_row["Reached"] = c["total_offers"]
    offer_row["Pending"] = c["offer_pending"]
    offer_row["Pass Rate"] = round(safe_rate(c["total_onboarded"], c["total_offers"]), 1)
    rows.append(offer_row)
    return pd.DataFrame(rows)


def build_group_table(summary: dict[str, dict[str, int]], key_label: str) -> pd.DataFrame:
    if not summary:
        return pd.DataFrame(columns=[key_label] + GROUP_STAT_KEYS)
    rows = [{key_label: name, **stats} for name, stats in summary.items()]
    df = pd.DataFrame(rows).reindex(columns=[key_label] + GROUP_STAT_KEYS)
    return df.sort_values(["profiles", key_label], ascending=[False, True]).reset_index(drop=True)


def build_experience_table(exp_summary: dict[str, int]) -> pd.DataFrame:
    total = sum(exp_summary.values())
    rows = []
    for bracket in EXPERIENCE_BRACKETS:
        count = exp_summary.get(bracket, 0)
        rows.append({"Experience": bracket, "Profiles": count, "Share Pct": round(safe_rate(count, total), 1)})
    return pd.DataFrame(rows)


def build_definitions_table() -> pd.DataFrame:
    rows = [
        {
            "Metric": "Total Profiles",
            "Definition": "Rows with at least one mapped column filled in (NA / - / nil count as not filled).",
        },
        {
            "Metric": "Interviews Scheduled",
            "Definition": "Rows with Screening Done = Yes, regardless of feedback.",
        },
        {
            "Metric": "Screening — Pending",
            "Definition": "Screening Done empty or NA.",
        },
        {
            "Metric": "Screening — Feedback Pending",
            "Definition": "Screening Done = Yes with empty feedback, or feedback text that matches no known outcome.",
        },
        {
            "Metric": "Screening — No-show",
            "Definition": "Screening Done = No, or feedback mentioning a no-show.",
        },
        {
            "Metric": "Screening Pass Rate",
            "Definition": "Selected / (Selected + Rejected + Hold).",
        },
        {
            "Metric": "Stage — Reached",
            "Definition": "Screening-selected candidates with a value in the stage column.",
        },
        {
            "Metric": "Stage — Pending",
            "Definition": "Screening-selected candidates whose furthest filled stage was selected (next stage pending) or is still in progress (this stage pending). With no stage filled, the first empty stage is pending.",
        },
        {
            "Metric": "Stage Pass Rate",
            "Definition": "Selected / (Selected + Rejected) for the stage.",
        },
        {
            "Metric": "Offer — Pending",
            "Definition": "Client Round selected with Offer Released not Yes.",
        },
        {
            "Metric": "Technical / HR Rejections",
            "Definition": "Rejection Type mentioning tech(nical), or HR / soft skills.",
        },
    ]
    return pd.DataFrame(rows)


def build_report_tables(result: FunnelResult) -> dict[str, pd.DataFrame]:
    return {
        "summary": build_summary_table(result),
        "stages": build_stage_table(result),
        "vendors": build_group_table(result.vendor_summary, "Vendor"),
        "technologies": build_group_table(result.tech_summary, "Technology"),
        "experience": build_experience_table(result.exp_summary),
        "definitions": build_definitions_table(),
    }


def result_to_payload(result: FunnelResult, extra: dict | None = None) -> dict:
    payload = result.to_dict()
    payload["exp_summary"] = {b: result.exp_summary.get(b, 0) for b in EXPERIENCE_BRACKETS}
    if extra:
        payload["extra"] = extra
    return payload


def write_report_files(
    result: FunnelResult,
    outdir: str,
    extra: dict | None = None,
) -> dict[str, str]:
    os.makedirs(outdir, exist_ok=True)
    paths: dict[str, str] = {}
    for name, df in build_report_tables(result).items():
        path = os.path.join(outdir, f"funnel_{name}.csv")
        df.to_csv(path, index=False)
        paths[name] = path

    json_path = os.path.join(outdir, "funnel_result.json")
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(result_to_payload(result, extra), f, indent=2)
    paths["json"] = json_path
    return paths


def apply_sheet_formatting(ws, rows: int, cols: int, headers: list[str]) -> None:
    sheet_id = ws._properties.get("sheetId")
    if sheet_id is None:
        return
    requests: list[dict] = [
        {
            "updateSheetProperties": {
                "properties": {"sheetId": sheet_id, "gridProperties": {"frozenRowCount": 1}},
                "fields": "gridProperties.frozenRowCount",
            }
        },
        {
            "repeatCell": {
                "range": {
                    "sheetId": sheet_id,
                    "startRowIndex": 0,
                    "endRowIndex": 1,
                    "startColumnIndex": 0,
                    "endColumnIndex": cols,
                },
                "cell": {
                    "userEnteredFormat": {
                        "backgroundColor": {"red": 0.92, "green": 0.95, "blue": 0.98},
                        "textFormat": {"bold": True},
                        "horizontalAlignment": "CENTER",
                    }
                },
                "fields": "userEnteredFormat(backgroundColor,textFormat,horizontalAlignment)",
            }
        },
    ]

    text_headers = {"metric", "definition", "stage", "vendor", "technology", "experience"}
    for idx, header in enumerate(headers):
        h = header.strip().lower()
        width = 360 if h in {"metric", "definition"} else 160 if h in text_headers else 120
        requests.append(
            {
                "updateDimensionProperties": {
                    "range": {
                        "sheetId": sheet_id,
                        "dimension": "COLUMNS",
                        "startIndex": idx,
                        "endIndex": idx + 1,
                    },
                    "properties": {"pixelSize": width},
                    "fields": "pixelSize",
                }
            }
        )
        if "rate" in h or "pct" in h:
            requests.append(
                {
                    "repeatCell": {
                        "range": {
                            "sheetId": sheet_id,
                            "startRowIndex": 1,
                            "endRowIndex": rows,
                            "startColumnIndex": idx,
                            "endColumnIndex": idx + 1,
                        },
                        "cell": {
                            "userEnteredFormat": {"numberFormat": {"type": "PERCENT", "pattern": "0.0%"}}
                        },
                        "fields": "userEnteredFormat.numberFormat",
                    }
                }
            )

    ws.spreadsheet.batch_update({"requests": requests})


def sanitize_for_sheet(dataframe: pd.DataFrame) -> pd.DataFrame:
    out = dataframe.copy()
    for col in out.columns:
        h = str(col).strip().lower()
        if "rate" not in h and "pct" not in h:
            continue
        series = cast(pd.Series, out[col])
        numeric = pd.to_numeric(series.astype(str).str.replace("%", "", regex=False).str.strip(), errors="coerce")
        # 0-100 scale from safe_rate(); Sheets PERCENT expects 0-1.
        out[col] = numeric.apply(lambda v: v / 100 if pd.notna(v) else v)
    return out


def write_dataframe_to_sheet(sheet_id: str, tab_name: str, df: pd.DataFrame, client=None) -> None:
    gc = client or load_gspread_client()
    sh = gc.open_by_key(sheet_id)
    try:
        ws = sh.worksheet(tab_name)
    except Exception:
        ws = sh.add_worksheet(title=tab_name, rows=str(max(100, len(df) + 1)), cols=str(max(20, len(df.columns))))
    rows = len(df) + 1
    cols = len(df.columns)
    ws.resize(rows=max(100, rows), cols=max(20, cols))
    ws.clear()
    safe_df = sanitize_for_sheet(df)
    data = [safe_df.columns.tolist()] + safe_df.astype(object).where(pd.notna(safe_df), "").values.tolist()
    ws.update(data, value_input_option="USER_ENTERED")
    apply_sheet_formatting(ws, rows=rows, cols=cols, headers=safe_df.columns.tolist())
    logger.info(f"Synced {len(df):,} rows to sheet tab '{tab_name}'")


def sync_report_to_sheet(
    sheet_id: str,
    tables: dict[str, pd.DataFrame],
    *,
    summary_only: bool = False,
    tab_prefix: str = "",
    client=None,
) -> None:
    tab_names = {
        "summary": "Summary",
        "stages": "Stages",
        "vendors": "Vendors",
        "technologies": "Technologies",
        "experience": "Experience",
        "definitions": "Definitions",
    }
    gc = client or load_gspread_client()
    for name, df in tables.items():
        if summary_only and name != "summary":
            continue
        write_dataframe_to_sheet(sheet_id, f"{tab_prefix}{tab_names.get(name, name)}", df, client=gc)
