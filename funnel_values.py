"""
Cell-value normalization for interview-tracker sheets.

Tracker cells are free text typed by recruiters ("RF Select", "Reject - No-show",
"L1 TB Reschedule", "NA", ...). Everything here is a total function: any cell
value maps to a defined answer and nothing raises.
"""

from __future__ import annotations

import math
import re
from typing import Callable, Collection, Mapping

EXPLICIT_SKIP_MARKERS = {"na", "n/a", "-", "--", "nil"}
YES_VALUES = {"yes", "y", "true", "1"}
NO_VALUES = {"no", "n", "false", "0"}

EXPERIENCE_BRACKETS = ["0-3 years", "3-5 years", "5-10 years", "10+ years"]


def _is_nan(value) -> bool:
    return isinstance(value, float) and math.isnan(value)


def cell_text(row: Mapping | None, header: str | None) -> str:
    if row is None or not header:
        return ""
    value = row.get(header)
    if value is None or _is_nan(value):
        return ""
    if isinstance(value, bool):
        return "yes" if value else ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def normalize_outcome(value) -> str:
    if value is None or _is_nan(value):
        return ""
    return str(value).strip().lower()


def is_empty(value) -> bool:
    """Truly empty: nothing was ever typed in the cell."""
    if value is None or _is_nan(value):
        return True
    return str(value).strip() == ""


def is_explicitly_skipped(value) -> bool:
    """NA / - / nil markers: the stage was bypassed on purpose."""
    if value is None or _is_nan(value):
        return False
    return normalize_outcome(value) in EXPLICIT_SKIP_MARKERS


def is_skipped(value) -> bool:
    return is_empty(value) or is_explicitly_skipped(value)


def has_value(value) -> bool:
    return not is_skipped(value)


def is_yes(value) -> bool:
    if value is None or _is_nan(value):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    return normalize_outcome(value) in YES_VALUES


def is_no(value) -> bool:
    if value is None or _is_nan(value):
        return False
    return normalize_outcome(value) in NO_VALUES


def _contains_any(value, needles: tuple[str, ...]) -> bool:
    v = normalize_outcome(value)
    return any(n in v for n in needles)


def is_select(value) -> bool:
    return _contains_any(value, ("select", "pass", "cleared"))


def is_reject(value) -> bool:
    # text mentioning a no-show never counts as a reject
    v = normalize_outcome(value)
    return "reject" in v and "no-show" not in v and "noshow" not in v


def is_hold(value) -> bool:
    return _contains_any(value, ("hold",))


def is_no_show(value) -> bool:
    return _contains_any(value, ("no-show", "noshow", "no show"))


def is_dropped_or_cancelled(value) -> bool:
    return _contains_any(value, ("drop", "cancel"))


def is_to_be_scheduled(value) -> bool:
    return _contains_any(value, ("tb ", "to be"))


def is_reschedule(value) -> bool:
    return _contains_any(value, ("reschedule", "re-schedule"))


def is_feedback_pending(value) -> bool:
    return _contains_any(value, ("feedback pending", "awaiting"))


def is_in_progress(value) -> bool:
    return (
        is_reschedule(value)
        or is_to_be_scheduled(value)
        or is_feedback_pending(value)
        or "pending" in normalize_outcome(value)
    )


# Order is precedence: the first matching rule wins.
OUTCOME_RULES: list[tuple[str, Callable[[object], bool]]] = [
    ("select", is_select),
    ("reject", is_reject),
    ("hold", is_hold),
    ("noshow", is_no_show),
    ("dropped", is_dropped_or_cancelled),
    ("to_be_scheduled", is_to_be_scheduled),
    ("reschedule", is_reschedule),
    ("feedback_pending", is_feedback_pending),
    ("in_progress", is_in_progress),
]


def classify_outcome(value, labels: Collection[str] | None = None) -> str | None:
    for label, predicate in OUTCOME_RULES:
        if labels is not None and label not in labels:
            continue
        if predicate(value):
            return label
    return None


def rejection_category(value) -> str | None:
    v = normalize_outcome(value)
    if "technical" in v or "tech" in v:
        return "technical"
    if "hr" in v or "soft" in v:
        return "hr"
    return None


def parse_experience(value) -> float:
    """
    Years of experience from a cell such as 4, "4.5", "5+ yrs" or "".

    Anything that is not a digit or a dot is dropped before parsing, so
    "5+ yrs" reads as 5.0. Unparseable input reads as 0.0.
    """
    if value is None or _is_nan(value) or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = re.sub(r"[^0-9.]", "", str(value).strip())
    m = re.match(r"\d+(?:\.\d*)?|\.\d+", cleaned)
    if not m:
        return 0.0
    return float(m.group(0))


def experience_bracket(years: float) -> str:
    if years < 3:
        return EXPERIENCE_BRACKETS[0]
    if years < 5:
        return EXPERIENCE_BRACKETS[1]
    if years < 10:
        return EXPERIENCE_BRACKETS[2]
    return EXPERIENCE_BRACKETS[3]
