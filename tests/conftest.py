import matplotlib

matplotlib.use("Agg")

import pytest

from funnel_config import DEFAULT_MAPPINGS


TRACKER_HEADERS = [
    "Candidate",
    "VENDOR",
    "TECHNOLOGY",
    "YoE",
    "Screening Done",
    "Feedback",
    "Rapid Fire",
    "L1",
    "L2",
    "Client Round",
    "Offer Released",
    "Onboarded",
    "Rejection Type",
]


@pytest.fixture
def mapping():
    return dict(DEFAULT_MAPPINGS)


@pytest.fixture
def make_row():
    def _make_row(cells: dict) -> dict:
        row = {h: "" for h in TRACKER_HEADERS}
        row.update(cells)
        return row

    return _make_row
