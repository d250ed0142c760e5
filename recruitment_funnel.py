"""
Compute interview-pipeline funnel metrics from a recruitment tracker sheet.

Usage (CSV export of the tracker):
  python recruitment_funnel.py \
    --csv ./Interview_Tracker.csv \
    --mappings ./column_mappings.json \
    --outdir ./out --charts

Google Sheets source and sync:
  export GOOGLE_SHEETS_CREDENTIALS=/path/to/service_account.json
  python recruitment_funnel.py \
    --sheet-id <spreadsheet_id> --worksheet "Tracker" \
    --sheet-output-id <report_spreadsheet_id>

Column overrides (saved back to --mappings with --save-mappings):
  python recruitment_funnel.py --csv ./tracker.csv \
    --map vendor="Vendor Name" --map rejection_type= --save-mappings
"""

from __future__ import annotations

import argparse
import logging
import os
import time
from contextlib import contextmanager

from funnel_analytics import calculate
from funnel_charts import render_charts
from funnel_config import (
    load_column_mappings,
    merge_mappings,
    parse_mapping_overrides,
    resolve_mappings,
    save_column_mappings,
)
from funnel_report import build_report_tables, sync_report_to_sheet, write_report_files
from sheet_source import load_csv_table, load_sheet_table, table_stats


def setup_logger(outdir: str, level: str = "INFO") -> logging.Logger:
    os.makedirs(outdir, exist_ok=True)
    logger = logging.getLogger("recruitment_funnel")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")

    sh = logging.StreamHandler()
    sh.setFormatter(fmt)
    logger.addHandler(sh)

    fh = logging.FileHandler(os.path.join(outdir, "run.log"), mode="w", encoding="utf-8")
    fh.setFormatter(fmt)
    logger.addHandler(fh)

    return logger


@contextmanager
def step(logger: logging.Logger, name: str):
    t0 = time.time()
    logger.info(f"[START] {name}")
    try:
        yield
    finally:
        dt = time.time() - t0
        logger.info(f"[DONE ] {name} | {dt:,.2f}s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Recruitment pipeline funnel metrics.")
    parser.add_argument("--csv", default=None, help="CSV export of the interview tracker.")
    parser.add_argument(
        "--sheet-id",
        default=os.environ.get("FUNNEL_SHEET_ID"),
        help="Google Sheet ID of the tracker (default: $FUNNEL_SHEET_ID).",
    )
    parser.add_argument("--worksheet", default=None, help="Tracker tab name (default: first tab).")
    parser.add_argument("--mappings", default=None, help="JSON file of field -> column header.")
    parser.add_argument(
        "--map",
        action="append",
        default=[],
        metavar="FIELD=HEADER",
        help="Override one column mapping; repeatable. FIELD= unbinds the field.",
    )
    parser.add_argument("--save-mappings", action="store_true", help="Write merged mappings back to --mappings.")
    parser.add_argument("--outdir", default="./out")
    parser.add_argument("--charts", action="store_true", help="Render PNG charts into --outdir.")
    parser.add_argument("--topn", type=int, default=15, help="Vendors/technologies shown in charts.")
    parser.add_argument("--sheet-output-id", default=None, help="Google Sheet ID to sync report tabs to.")
    parser.add_argument("--sheet-tab-prefix", default="", help="Prefix for synced tab names.")
    parser.add_argument("--sheet-summary-only", action="store_true", help="Only sync the summary tab.")
    parser.add_argument("--log-level", default="INFO")
    return parser


def run(argv: list[str] | None = None) -> dict[str, str]:
    args = build_parser().parse_args(argv)
    logger = setup_logger(args.outdir, args.log_level)

    if not args.csv and not args.sheet_id:
        raise ValueError("Provide --csv or --sheet-id (or set FUNNEL_SHEET_ID).")
    if args.save_mappings and not args.mappings:
        raise ValueError("--save-mappings requires --mappings.")

    mappings = load_column_mappings(args.mappings)
    overrides = parse_mapping_overrides(args.map)
    if overrides:
        mappings = merge_mappings({**mappings, **overrides})
    if args.save_mappings:
        save_column_mappings(args.mappings, mappings)
        logger.info(f"Saved column mappings: {args.mappings}")

    with step(logger, "Load tracker table"):
        if args.csv:
            table = load_csv_table(args.csv)
        else:
            table = load_sheet_table(args.sheet_id, args.worksheet)
        for s in table_stats(table["headers"], table["rows"]):
            logger.info(f"{s['label']}: {s['value']}")

    resolved = resolve_mappings(table["headers"], mappings)
    logger.info("Column mapping | " + " | ".join(f"{k}: {v or '-'}" for k, v in resolved.items()))

    with step(logger, "Compute funnel"):
        result = calculate(table["rows"], resolved)

    extra = {
        "source": args.csv or f"sheet:{args.sheet_id}",
        "sheet_name": table.get("sheet_name", ""),
        "fetched_at": table.get("fetched_at", ""),
        "column_mapping": resolved,
    }
    with step(logger, "Write report files"):
        paths = write_report_files(result, args.outdir, extra=extra)

    if args.charts:
        with step(logger, "Render charts"):
            charts = render_charts(result, args.outdir, topn=args.topn)
            logger.info(f"Charts written: {len(charts)}")

    if args.sheet_output_id:
        with step(logger, "Sync report to Google Sheets"):
            sync_report_to_sheet(
                args.sheet_output_id,
                build_report_tables(result),
                summary_only=args.sheet_summary_only,
                tab_prefix=args.sheet_tab_prefix,
            )

    c = result.counters
    logger.info("=== Funnel Output ===")
    logger.info(f"Profiles: {c['total_profiles']:,} of {c['total_rows']:,} rows")
    logger.info(
        f"Screening | pending: {c['screening_pending']:,} | feedback pending: {c['screening_feedback_pending']:,} "
        f"| selected: {c['screening_selected']:,} | rejected: {c['screening_rejected']:,} "
        f"| hold: {c['screening_hold']:,} | no-show: {c['screening_no_show']:,}"
    )
    logger.info(
        f"Pending | RF: {c['rf_pending']:,} | L1: {c['l1_pending']:,} | L2: {c['l2_pending']:,} "
        f"| Client: {c['client_pending']:,} | Offer: {c['offer_pending']:,}"
    )
    logger.info(f"Offers: {c['total_offers']:,} | Onboarded: {c['total_onboarded']:,}")
    logger.info(f"Outputs: {' | '.join(paths.values())}")
    return paths


def main() -> None:
    run()


if __name__ == "__main__":
    main()
