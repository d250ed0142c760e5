"""Table loading from CSV and from a (fake) gspread client."""

import pytest

from sheet_source import load_csv_table, load_sheet_table, table_from_values, table_stats


class FakeWorksheet:
    def __init__(self, title, values):
        self.title = title
        self._values = values

    def get_all_values(self):
        return self._values


class FakeSpreadsheet:
    def __init__(self, worksheets):
        self._worksheets = worksheets

    def worksheets(self):
        return list(self._worksheets)


class FakeClient:
    def __init__(self, spreadsheet):
        self.spreadsheet = spreadsheet
        self.opened = []

    def open_by_key(self, key):
        self.opened.append(key)
        return self.spreadsheet


def test_table_from_values_trims_and_pads():
    table = table_from_values([[" Name ", "L1 "], [" Asha ", " Select "], ["Ravi"]])
    assert table["headers"] == ["Name", "L1"]
    assert table["rows"] == [{"Name": "Asha", "L1": "Select"}, {"Name": "Ravi", "L1": ""}]
    assert table["row_count"] == 2


def test_empty_sheet_raises():
    with pytest.raises(ValueError) as exc_info:
        table_from_values([], sheet_name="Tracker")
    assert "The sheet is empty" in str(exc_info.value)


def test_csv_keeps_na_markers(tmp_path):
    path = tmp_path / "tracker.csv"
    path.write_text("VENDOR,Rapid Fire,L1\nAcme,NA,\nBeta,N/A,Select\n", encoding="utf-8")
    table = load_csv_table(str(path))
    assert table["headers"] == ["VENDOR", "Rapid Fire", "L1"]
    assert table["rows"][0] == {"VENDOR": "Acme", "Rapid Fire": "NA", "L1": ""}
    assert table["rows"][1]["Rapid Fire"] == "N/A"


def test_load_sheet_table_first_tab_by_default():
    ws = FakeWorksheet("Tracker", [["VENDOR", "L1"], ["Acme", "Select"]])
    client = FakeClient(FakeSpreadsheet([ws, FakeWorksheet("Other", [["x"]])]))
    table = load_sheet_table(" abc123 ", client=client)
    assert client.opened == ["abc123"]
    assert table["sheet_name"] == "Tracker"
    assert table["rows"] == [{"VENDOR": "Acme", "L1": "Select"}]


def test_load_sheet_table_named_tab():
    client = FakeClient(FakeSpreadsheet([FakeWorksheet("A", [["x"]]), FakeWorksheet("B", [["y"], ["1"]])]))
    table = load_sheet_table("id", worksheet="B", client=client)
    assert table["headers"] == ["y"]


def test_load_sheet_table_requires_id():
    with pytest.raises(ValueError):
        load_sheet_table("  ", client=FakeClient(FakeSpreadsheet([])))


def test_table_stats():
    headers = ["Name", "YoE", "Score"]
    rows = [
        {"Name": "a", "YoE": "2", "Score": "x"},
        {"Name": "b", "YoE": "4", "Score": "y"},
        {"Name": "c", "YoE": "", "Score": "1"},
    ]
    stats = table_stats(headers, rows)
    assert stats[0] == {"label": "Total Rows", "value": "3"}
    assert stats[1] == {"label": "Total Columns", "value": "3"}
    assert {"label": "Avg YoE", "value": "3.00"} in stats
    assert not any(s["label"] == "Avg Score" for s in stats)


def test_load_sheet_table_missing_tab_raises():
    client = FakeClient(FakeSpreadsheet([FakeWorksheet("Tracker", [["x"]])]))
    with pytest.raises(ValueError) as exc_info:
        load_sheet_table("id", worksheet="Archive", client=client)
    assert "Sheet not found: Archive" in str(exc_info.value)


def test_load_sheet_table_no_tabs_raises():
    with pytest.raises(ValueError) as exc_info:
        load_sheet_table("id", client=FakeClient(FakeSpreadsheet([])))
    assert "Sheet not found" in str(exc_info.value)
