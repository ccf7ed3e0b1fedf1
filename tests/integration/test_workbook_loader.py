#!/usr/bin/env python3
"""
Integration tests for the Excel workbook loader.

Builds real .xlsx files with openpyxl and reads them back.
"""

from datetime import datetime

import pytest
from openpyxl import Workbook

from spendsight.workbook.loader import (
    WorkbookError,
    clean_cell,
    list_sheets,
    normalize_header,
    read_rows,
    sheet_key,
)


@pytest.fixture
def sample_workbook(tmp_path):
    """Two-sheet workbook with messy headers and cells."""
    path = tmp_path / "TravelBuddy Trxn History.xlsx"
    workbook = Workbook()

    sheet = workbook.active
    sheet.title = "Transactions"
    sheet.append(["Txn Date", "Amount/BHD", " Country ", "Meta"])
    sheet.append([datetime(2024, 3, 5, 10, 0), 10, "India", '{"channel": "pos"}'])
    sheet.append([None, None, None, None])
    sheet.append([datetime(2024, 3, 7, 12, 0), 5.5, "#N/A", "{broken"])
    sheet.append([45587, 7, None, None])

    loads = workbook.create_sheet("Wallet Loads")
    loads.append(["Txn_Date", "Amount"])
    loads.append(["2024-03-01 09:00:00", 200])

    workbook.save(path)
    return path


@pytest.mark.integration
class TestReadRows:
    """Test reading sheets into rows."""

    def test_list_sheets_in_order(self, sample_workbook):
        assert list_sheets(sample_workbook) == ["Transactions", "Wallet Loads"]

    def test_headers_are_normalized_and_blank_rows_dropped(self, sample_workbook):
        rows = read_rows(sample_workbook, "Transactions")

        assert len(rows) == 3
        assert set(rows[0]) == {"Txn_Date", "Amount_BHD", "Country", "Meta"}

    def test_cell_values_are_cleaned(self, sample_workbook):
        first, second, third = read_rows(sample_workbook, "Transactions")

        assert first["Txn_Date"] == datetime(2024, 3, 5, 10, 0)
        assert first["Amount_BHD"] == 10
        assert first["Meta"] == {"channel": "pos"}
        assert second["Country"] == {"_error": "#N/A"}
        assert second["Meta"] == "{broken"
        assert third["Txn_Date"] == 45587
        assert third["Country"] is None

    def test_first_sheet_by_default(self, sample_workbook):
        assert len(read_rows(sample_workbook)) == 3

    def test_named_sheet(self, sample_workbook):
        assert read_rows(sample_workbook, "Wallet Loads") == [{"Txn_Date": "2024-03-01 09:00:00", "Amount": 200}]

    def test_password_on_unencrypted_workbook_is_ignored(self, sample_workbook):
        assert len(read_rows(sample_workbook, "Wallet Loads", password="secret")) == 1


@pytest.mark.integration
class TestReadErrors:
    """Test failures surface as WorkbookError."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(WorkbookError, match="Missing.xlsx"):
            read_rows(tmp_path / "Missing.xlsx")

    def test_missing_file_is_an_os_error(self, tmp_path):
        with pytest.raises(OSError):
            list_sheets(tmp_path / "Missing.xlsx")

    def test_not_a_workbook(self, tmp_path):
        path = tmp_path / "Broken.xlsx"
        path.write_text("plain text", encoding="utf-8")
        with pytest.raises(WorkbookError):
            list_sheets(path)

    def test_missing_sheet(self, sample_workbook):
        with pytest.raises(WorkbookError):
            read_rows(sample_workbook, "No Such Sheet")


class TestHelpers:
    """Test the pure helpers."""

    @pytest.mark.parametrize(
        "raw,expected",
        [("Txn Date", "Txn_Date"), ("Amount/BHD", "Amount_BHD"), ("  MCC  Category ", "MCC_Category")],
    )
    def test_normalize_header(self, raw, expected):
        assert normalize_header(raw) == expected

    def test_sheet_key(self):
        assert sheet_key("Flyy points") == "flyy_points"
        assert sheet_key(" Load ") == "load"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (float("nan"), None),
            ("#REF!", {"_error": "#REF!"}),
            ("[1, 2]", [1, 2]),
            ("plain", "plain"),
            (True, True),
        ],
        ids=["nan", "error_literal", "json_array", "text", "bool"],
    )
    def test_clean_cell(self, raw, expected):
        assert clean_cell(raw) == expected
