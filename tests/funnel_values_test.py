"""Cell normalization: skip markers, yes/no, outcome precedence, experience parsing."""

import math

import pytest

from funnel_values import (
    cell_text,
    classify_outcome,
    experience_bracket,
    has_value,
    is_empty,
    is_explicitly_skipped,
    is_in_progress,
    is_no,
    is_no_show,
    is_reject,
    is_skipped,
    is_yes,
    parse_experience,
    rejection_category,
)


@pytest.mark.parametrize(
    "value",
    [None, "", "   ", "NA", "n/a", " - ", "--", "Nil", "Select", "RF Reschedule", 0, 1, True, False, math.nan],
)
def test_has_value_is_complement_of_is_skipped(value):
    assert has_value(value) == (not is_skipped(value))


def test_empty_vs_explicitly_skipped():
    assert is_empty(None)
    assert is_empty("  ")
    assert is_empty(math.nan)
    assert not is_empty("NA")
    assert is_explicitly_skipped("NA")
    assert is_explicitly_skipped(" n/a ")
    assert is_explicitly_skipped("nil")
    assert not is_explicitly_skipped(None)
    assert not is_explicitly_skipped("")
    assert not is_explicitly_skipped("N.A.")


def test_yes_and_no():
    assert is_yes(True)
    assert is_yes(1)
    assert is_yes(" YES ")
    assert is_yes("y")
    assert is_yes("1")
    assert not is_yes(False)
    assert not is_yes(2)
    assert not is_yes("Done")
    assert not is_yes(None)
    assert is_no("No")
    assert is_no("0")
    assert is_no("false")
    assert not is_no(None)
    assert not is_no("")


def test_reject_with_no_show_text_is_not_a_rejection():
    assert not is_reject("Reject - No-show")
    assert is_no_show("Reject - No-show")
    assert is_reject("Rejected")


@pytest.mark.parametrize(
    "value,expected",
    [
        ("RF Select", "select"),
        ("Passed", "select"),
        ("Cleared", "select"),
        ("Rejected", "reject"),
        ("On Hold", "hold"),
        ("Candidate No show", "noshow"),
        ("Dropped", "dropped"),
        ("Cancelled by client", "dropped"),
        ("RF TB Reschedule", "to_be_scheduled"),
        ("To be scheduled", "to_be_scheduled"),
        ("L1 Re-schedule", "reschedule"),
        ("Feedback Pending", "feedback_pending"),
        ("Awaiting panel", "feedback_pending"),
        ("Slot pending", "in_progress"),
        ("Some remark", None),
    ],
)
def test_classify_outcome_precedence(value, expected):
    assert classify_outcome(value) == expected


def test_classify_outcome_respects_label_subset():
    assert classify_outcome("On Hold", ["select", "reject"]) is None
    assert classify_outcome("Selected but on hold", ["select", "hold"]) == "select"


def test_in_progress_family():
    assert is_in_progress("RF Reschedule")
    assert is_in_progress("tb scheduled")
    assert is_in_progress("Pending")
    assert not is_in_progress("Rejected")


def test_cell_text():
    row = {"A": "  x  ", "B": True, "C": False, "D": 4.0, "E": 4.5, "F": None, "G": math.nan, "H": 7}
    assert cell_text(row, "A") == "x"
    assert cell_text(row, "B") == "yes"
    assert cell_text(row, "C") == ""
    assert cell_text(row, "D") == "4"
    assert cell_text(row, "E") == "4.5"
    assert cell_text(row, "F") == ""
    assert cell_text(row, "G") == ""
    assert cell_text(row, "H") == "7"
    assert cell_text(row, "missing") == ""
    assert cell_text(row, None) == ""
    assert cell_text(None, "A") == ""


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        ("4", 4.0),
        ("4.5 yrs", 4.5),
        ("5+ years", 5.0),
        (" 10 ", 10.0),
        (7, 7.0),
        (2.5, 2.5),
        (".5", 0.5),
    ],
)
def test_parse_experience(value, expected):
    assert parse_experience(value) == expected


@pytest.mark.parametrize(
    "years,bracket",
    [
        (0, "0-3 years"),
        (2.99, "0-3 years"),
        (3.0, "3-5 years"),
        (4.99, "3-5 years"),
        (5.0, "5-10 years"),
        (9.99, "5-10 years"),
        (10.0, "10+ years"),
        (25, "10+ years"),
    ],
)
def test_experience_bracket_boundaries(years, bracket):
    assert experience_bracket(years) == bracket


def test_rejection_category():
    assert rejection_category("Technical") == "technical"
    assert rejection_category("Tech skills") == "technical"
    assert rejection_category("HR") == "hr"
    assert rejection_category("Soft skills") == "hr"
    assert rejection_category("") is None
    assert rejection_category("Salary") is None
