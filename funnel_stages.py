"""
Per-candidate pipeline state: screening status, stage outcomes and the single
stage a progressing candidate is currently pending at.

Funnel order: Screening -> RF -> L1 -> L2 -> Client -> Offer -> Onboarded.
"""

from __future__ import annotations

from dataclasses import dataclass

from funnel_values import (
    classify_outcome,
    has_value,
    is_empty,
    is_in_progress,
    is_no,
    is_select,
    is_skipped,
    is_yes,
)

# Interview rounds in funnel order; "offer" follows the last one.
PIPELINE_STAGES = ("rf", "l1", "l2", "client")
PENDING_STAGES = PIPELINE_STAGES + ("offer",)

SCREENING_STATUSES = ("pending", "feedbackPending", "selected", "rejected", "hold", "noshow")

_SCREENING_FEEDBACK_LABELS = frozenset({"select", "reject", "hold", "noshow"})
_FEEDBACK_STATUS = {
    "select": "selected",
    "reject": "rejected",
    "hold": "hold",
    "noshow": "noshow",
}

STAGE_OUTCOME_LABELS = (
    "select",
    "reject",
    "dropped",
    "to_be_scheduled",
    "reschedule",
    "feedback_pending",
    "in_progress",
)
_IN_PROGRESS_LABELS = frozenset({"to_be_scheduled", "reschedule", "feedback_pending", "in_progress"})


@dataclass(frozen=True)
class ScreeningStatus:
    status: str = "pending"
    is_screened: bool = False
    unrecognized_feedback: bool = False

    @property
    def can_progress(self) -> bool:
        return self.status == "selected"


@dataclass(frozen=True)
class StageOutcome:
    # None when the cell is empty or explicitly skipped, "other" for terminal
    # text with no outcome keyword (e.g. "On Hold").
    label: str | None = None

    @property
    def has_value(self) -> bool:
        return self.label is not None

    @property
    def is_select(self) -> bool:
        return self.label == "select"

    @property
    def is_reject(self) -> bool:
        return self.label == "reject"

    @property
    def is_dropped(self) -> bool:
        return self.label == "dropped"

    @property
    def is_to_be_scheduled(self) -> bool:
        return self.label == "to_be_scheduled"

    @property
    def is_reschedule(self) -> bool:
        return self.label == "reschedule"

    @property
    def is_feedback_pending(self) -> bool:
        return self.label == "feedback_pending"

    @property
    def is_in_progress(self) -> bool:
        return self.label in _IN_PROGRESS_LABELS


def get_screening_status(screening_done, screening_feedback) -> ScreeningStatus:
    """
    Screening state machine, first match wins:
    - done empty/NA -> pending
    - done "No" -> noshow (the interview did not happen)
    - done "Yes" -> decided by feedback; empty or unrecognized feedback is
      feedbackPending so an odd cell never drops a candidate
    """
    if is_skipped(screening_done):
        return ScreeningStatus("pending")
    if is_no(screening_done):
        return ScreeningStatus("noshow")
    if not is_yes(screening_done):
        return ScreeningStatus("pending")

    if is_skipped(screening_feedback):
        return ScreeningStatus("feedbackPending", is_screened=True)
    label = classify_outcome(screening_feedback, _SCREENING_FEEDBACK_LABELS)
    if label is None:
        return ScreeningStatus("feedbackPending", is_screened=True, unrecognized_feedback=True)
    return ScreeningStatus(_FEEDBACK_STATUS[label], is_screened=True)


def parse_stage_outcome(value) -> StageOutcome:
    if is_skipped(value):
        return StageOutcome()
    return StageOutcome(classify_outcome(value, STAGE_OUTCOME_LABELS) or "other")


def determine_pending_stage(rf, l1, l2, client, offer) -> str | None:
    """
    Stage a screening-selected candidate is waiting on, or None.

    The furthest stage with a value decides: a later value means earlier
    empty cells were bypassed, not stalled. With no values at all, the first
    truly empty stage is pending; NA/- markers are never pending.
    """
    if is_yes(offer):
        return None

    values = (rf, l1, l2, client)
    for idx in range(len(PIPELINE_STAGES) - 1, -1, -1):
        value = values[idx]
        if not has_value(value):
            continue
        if is_select(value):
            return PENDING_STAGES[idx + 1]
        if is_in_progress(value):
            return PIPELINE_STAGES[idx]
        return None

    for stage, value in zip(PIPELINE_STAGES, values):
        if is_empty(value):
            return stage
    return None
