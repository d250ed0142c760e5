"""End-to-end CLI run over a CSV tracker export."""

import json

import pandas as pd
import pytest

from recruitment_funnel import run

TRACKER_CSV = """\
VENDOR,TECHNOLOGY,YoE,Screening Done,Feedback,Rapid Fire,L1,L2,Client Round,Offer Released,Onboarded,Rejection Type
Acme,Java,4,Yes,Select,RF Select,L1 Select,,,,,
Acme,Java,2.5,Yes,Reject,,,,,,,Technical
Beta,Python,12 yrs,Yes,Select,NA,NA,NA,NA,,,
,,,,,,,,,,,
Beta,,6,No,,,,,,,,
"""


@pytest.fixture
def tracker_csv(tmp_path):
    path = tmp_path / "tracker.csv"
    path.write_text(TRACKER_CSV, encoding="utf-8")
    return path


def test_cli_writes_reports(tmp_path, tracker_csv):
    outdir = tmp_path / "out"
    run(["--csv", str(tracker_csv), "--outdir", str(outdir), "--charts"])

    payload = json.loads((outdir / "funnel_result.json").read_text())
    counters = payload["counters"]
    assert counters["total_rows"] == 5
    assert counters["total_profiles"] == 4
    assert counters["screening_selected"] == 2
    assert counters["screening_rejected"] == 1
    assert counters["screening_no_show"] == 1
    assert counters["l2_pending"] == 1
    assert counters["rf_pending"] == 0
    assert counters["technical_rejections"] == 1
    assert payload["tech_summary"]["Other"]["profiles"] == 1
    assert payload["exp_summary"] == {"0-3 years": 1, "3-5 years": 1, "5-10 years": 1, "10+ years": 1}

    vendors = pd.read_csv(outdir / "funnel_vendors.csv")
    assert vendors["Vendor"].tolist() == ["Acme", "Beta"]
    assert (outdir / "run.log").exists()
    assert (outdir / "funnel_stages.png").exists()


def test_cli_map_override_and_save(tmp_path, tracker_csv):
    outdir = tmp_path / "out"
    mappings_path = tmp_path / "mappings.json"
    run(
        [
            "--csv",
            str(tracker_csv),
            "--outdir",
            str(outdir),
            "--mappings",
            str(mappings_path),
            "--map",
            "vendor=",
            "--save-mappings",
        ]
    )
    saved = json.loads(mappings_path.read_text())["mappings"]
    assert saved["vendor"] is None
    payload = json.loads((outdir / "funnel_result.json").read_text())
    assert list(payload["vendor_summary"]) == ["Unknown"]


def test_cli_requires_a_source(tmp_path, monkeypatch):
    monkeypatch.delenv("FUNNEL_SHEET_ID", raising=False)
    with pytest.raises(ValueError):
        run(["--outdir", str(tmp_path)])
