"""
Fold interview-tracker rows into funnel counters.

calculate() makes one pass over the rows. Each row is classified on its own
(screening status, pending stage, per-stage outcomes) and added to a result
built fresh for that call, so repeated calls over the same rows give the same
result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

import pandas as pd

from funnel_config import canonical_field
from funnel_stages import (
    PENDING_STAGES,
    PIPELINE_STAGES,
    determine_pending_stage,
    get_screening_status,
    parse_stage_outcome,
)
from funnel_values import (
    cell_text,
    experience_bracket,
    is_skipped,
    is_yes,
    parse_experience,
    rejection_category,
)

logger = logging.getLogger("recruitment_funnel.analytics")

UNKNOWN_VENDOR = "Unknown"
OTHER_TECHNOLOGY = "Other"

STAGE_FIELDS = {
    "rf": "rapid_fire",
    "l1": "l1",
    "l2": "l2",
    "client": "client_round",
}

SCREENING_COUNTERS = {
    "pending": "screening_pending",
    "feedbackPending": "screening_feedback_pending",
    "selected": "screening_selected",
    "rejected": "screening_rejected",
    "hold": "screening_hold",
    "noshow": "screening_no_show",
}

# Outcome label -> counter suffix; "in_progress" is counted separately.
STAGE_OUTCOME_COUNTERS = {
    "select": "selected",
    "reject": "rejected",
    "dropped": "dropped",
    "reschedule": "reschedule",
    "to_be_scheduled": "to_be_scheduled",
    "feedback_pending": "feedback_pending",
}


def _counter_keys() -> list[str]:
    keys = [
        "total_rows",
        "total_profiles",
        "interviews_scheduled",
        "total_offers",
        "total_onboarded",
    ]
    keys += list(SCREENING_COUNTERS.values())
    keys += [f"{stage}_reached" for stage in PIPELINE_STAGES]
    keys += [f"{stage}_pending" for stage in PENDING_STAGES]
    for stage in PIPELINE_STAGES:
        keys += [f"{stage}_{suffix}" for suffix in STAGE_OUTCOME_COUNTERS.values()]
        keys.append(f"{stage}_in_progress")
    keys += ["no_show_count", "technical_rejections", "hr_rejections"]
    return keys


COUNTER_KEYS = _counter_keys()

GROUP_STAT_KEYS = (
    [
        "profiles",
        "screened",
        "screening_selected",
        "screening_rejected",
        "screening_hold",
        "screening_pending",
    ]
    + [f"{stage}_{kind}" for stage in PIPELINE_STAGES for kind in ("pending", "selected", "rejected")]
    + ["offer_pending", "offers", "onboarded"]
)


def new_group_stats() -> dict[str, int]:
    return {k: 0 for k in GROUP_STAT_KEYS}


@dataclass
class FunnelResult:
    counters: dict[str, int] = field(default_factory=lambda: {k: 0 for k in COUNTER_KEYS})
    vendor_summary: dict[str, dict[str, int]] = field(default_factory=dict)
    tech_summary: dict[str, dict[str, int]] = field(default_factory=dict)
    exp_summary: dict[str, int] = field(default_factory=dict)
    # Screened rows whose feedback text matched no known outcome.
    unrecognized_feedback: int = 0

    def __getitem__(self, key: str) -> int:
        return self.counters[key]

    def to_dict(self) -> dict:
        return {
            "counters": dict(self.counters),
            "vendor_summary": {k: dict(v) for k, v in self.vendor_summary.items()},
            "tech_summary": {k: dict(v) for k, v in self.tech_summary.items()},
            "exp_summary": dict(self.exp_summary),
            "unrecognized_feedback": self.unrecognized_feedback,
        }


def _row_has_data(row: Mapping, column_mapping: Mapping[str, str | None]) -> bool:
    headers = [h for h in column_mapping.values() if h]
    return any(not is_skipped(cell_text(row, h)) for h in headers)


def _update_group(
    stats: dict[str, int],
    *,
    screening,
    pending_stage: str | None,
    outcomes: dict,
    offered: bool,
    onboarded: bool,
) -> None:
    stats["profiles"] += 1
    if screening.is_screened:
        stats["screened"] += 1
    if screening.status == "selected":
        stats["screening_selected"] += 1
    elif screening.status == "rejected":
        stats["screening_rejected"] += 1
    elif screening.status == "hold":
        stats["screening_hold"] += 1
    elif screening.status == "pending":
        stats["screening_pending"] += 1

    if screening.can_progress:
        if pending_stage is not None:
            stats[f"{pending_stage}_pending"] += 1
        for stage, outcome in outcomes.items():
            if outcome.is_select:
                stats[f"{stage}_selected"] += 1
            elif outcome.is_reject:
                stats[f"{stage}_rejected"] += 1

    if offered:
        stats["offers"] += 1
    if onboarded:
        stats["onboarded"] += 1


def calculate(rows: Iterable[Mapping], column_mapping: Mapping[str, str | None]) -> FunnelResult:
    # camelCase aliases bind like their snake_case fields; unknown keys raise ValueError
    column_mapping = {canonical_field(k): v for k, v in column_mapping.items()}
    result = FunnelResult()
    counters = result.counters

    def value_of(row: Mapping, field_name: str) -> str:
        return cell_text(row, column_mapping.get(field_name))

    for row in rows:
        counters["total_rows"] += 1
        if not _row_has_data(row, column_mapping):
            continue
        counters["total_profiles"] += 1

        screening = get_screening_status(value_of(row, "screening_done"), value_of(row, "screening_feedback"))
        if screening.is_screened:
            counters["interviews_scheduled"] += 1
        counters[SCREENING_COUNTERS[screening.status]] += 1
        if screening.status == "noshow":
            counters["no_show_count"] += 1
        if screening.unrecognized_feedback:
            result.unrecognized_feedback += 1

        stage_values = {stage: value_of(row, field_name) for stage, field_name in STAGE_FIELDS.items()}
        offer_value = value_of(row, "offer_released")

        pending_stage = None
        outcomes: dict = {}
        if screening.can_progress:
            pending_stage = determine_pending_stage(
                stage_values["rf"],
                stage_values["l1"],
                stage_values["l2"],
                stage_values["client"],
                offer_value,
            )
            if pending_stage is not None:
                counters[f"{pending_stage}_pending"] += 1

            for stage in PIPELINE_STAGES:
                outcome = parse_stage_outcome(stage_values[stage])
                outcomes[stage] = outcome
                if not outcome.has_value:
                    continue
                counters[f"{stage}_reached"] += 1
                suffix = STAGE_OUTCOME_COUNTERS.get(outcome.label)
                if suffix is not None:
                    counters[f"{stage}_{suffix}"] += 1
                if outcome.is_in_progress:
                    counters[f"{stage}_in_progress"] += 1

        offered = is_yes(offer_value)
        onboarded = is_yes(value_of(row, "onboarded"))
        if offered:
            counters["total_offers"] += 1
        if onboarded:
            counters["total_onboarded"] += 1

        category = rejection_category(value_of(row, "rejection_type"))
        if category == "technical":
            counters["technical_rejections"] += 1
        elif category == "hr":
            counters["hr_rejections"] += 1

        vendor = value_of(row, "vendor") or UNKNOWN_VENDOR
        tech = value_of(row, "technology") or OTHER_TECHNOLOGY
        for summary, key in ((result.vendor_summary, vendor), (result.tech_summary, tech)):
            stats = summary.setdefault(key, new_group_stats())
            _update_group(
                stats,
                screening=screening,
                pending_stage=pending_stage,
                outcomes=outcomes,
                offered=offered,
                onboarded=onboarded,
            )

        bracket = experience_bracket(parse_experience(value_of(row, "experience")))
        result.exp_summary[bracket] = result.exp_summary.get(bracket, 0) + 1

    if result.unrecognized_feedback:
        logger.warning(
            f"{result.unrecognized_feedback:,} screened rows have unrecognized feedback text; counted as feedback pending"
        )
    return result


def dataframe_rows(df: pd.DataFrame) -> list[dict]:
    """Rows of a DataFrame as header -> value dicts, NaN cells as empty strings."""
    clean = df.copy()
    clean.columns = [str(c).strip() for c in clean.columns]
    clean = clean.astype(object).where(pd.notna(clean), "")
    return clean.to_dict(orient="records")


def calculate_frame(df: pd.DataFrame, column_mapping: Mapping[str, str | None]) -> FunnelResult:
    return calculate(dataframe_rows(df), column_mapping)
